# lotbook/models/__init__.py

from .entry import Entry
from .grading_result import GradingResult
from .cooking_result import CookingResult
from .pricing_offer import PricingOffer

from .lot_allotment import LotAllotment
from .delivery_trip import DeliveryTrip
from .weight_record import WeightRecord
from .settlement import Settlement

from .storage_target import StorageTarget
from .audit_log import AuditLog
