# lotbook/enums.py

from enum import Enum


class Role(str, Enum):
    STAFF = "staff"
    SUPERVISOR = "supervisor"
    MANAGER = "manager"
    ADMIN = "admin"
    OWNER = "owner"


class WorkflowStatus(str, Enum):
    INTAKE = "INTAKE"
    GRADED = "GRADED"
    COOKING = "COOKING"
    PRICING = "PRICING"
    ALLOTTED = "ALLOTTED"
    DELIVERING = "DELIVERING"
    WEIGHED = "WEIGHED"
    OWNER_SETTLED = "OWNER_SETTLED"
    MANAGER_SETTLED = "MANAGER_SETTLED"
    REVIEW = "REVIEW"
    DONE = "DONE"
    FAILED = "FAILED"


# Order of the pipeline; FAILED sits outside it
PIPELINE = [
    WorkflowStatus.INTAKE,
    WorkflowStatus.GRADED,
    WorkflowStatus.COOKING,
    WorkflowStatus.PRICING,
    WorkflowStatus.ALLOTTED,
    WorkflowStatus.DELIVERING,
    WorkflowStatus.WEIGHED,
    WorkflowStatus.OWNER_SETTLED,
    WorkflowStatus.MANAGER_SETTLED,
    WorkflowStatus.REVIEW,
    WorkflowStatus.DONE,
]

# Per-trip stages, lowest first
TRIP_STAGES = [
    WorkflowStatus.DELIVERING,
    WorkflowStatus.WEIGHED,
    WorkflowStatus.OWNER_SETTLED,
    WorkflowStatus.MANAGER_SETTLED,
]


class EntryType(str, Enum):
    NEW_SAMPLE = "NEW_SAMPLE"
    READY_LORRY = "READY_LORRY"
    LOCATION_SAMPLE = "LOCATION_SAMPLE"


class Packaging(str, Enum):
    KG_75 = "75kg"
    KG_40 = "40kg"


class LotDecision(str, Enum):
    PASS_NO_COOK = "PASS_NO_COOK"
    PASS_WITH_COOK = "PASS_WITH_COOK"
    FAIL = "FAIL"

    @classmethod
    def _missing_(cls, value):
        aliases = {
            "PASS_WITHOUT_COOKING": cls.PASS_NO_COOK,
            "PASS_WITH_COOKING": cls.PASS_WITH_COOK,
        }
        return aliases.get(str(value).upper())


class CookingStatus(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    RECHECK = "RECHECK"
    MEDIUM = "MEDIUM"


class BaseRateType(str, Enum):
    PD_LOOSE = "PD_LOOSE"
    PD_WB = "PD_WB"
    MD_LOOSE = "MD_LOOSE"
    MD_WB = "MD_WB"

    @property
    def is_loose(self) -> bool:
        return self in (BaseRateType.PD_LOOSE, BaseRateType.MD_LOOSE)


class RateUnit(str, Enum):
    PER_BAG = "PER_BAG"
    PER_QUINTAL = "PER_QUINTAL"


class SuteUnit(str, Enum):
    PER_BAG = "PER_BAG"
    PER_TON = "PER_TON"


class FieldOwner(str, Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"


class StorageKind(str, Enum):
    WAREHOUSE = "WAREHOUSE"
    DIRECT_KUNCHINITTU = "DIRECT_KUNCHINITTU"
    DIRECT_OUTTURN = "DIRECT_OUTTURN"


class TargetKind(str, Enum):
    KUNCHINITTU = "KUNCHINITTU"
    OUTTURN = "OUTTURN"
