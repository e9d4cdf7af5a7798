# lotbook/services/lookups.py

from __future__ import annotations

from typing import Dict, Iterable, Optional

from lotbook.enums import StorageKind, TargetKind
from lotbook.errors import ValidationError, VarietyMismatch
from lotbook.extensions import db
from lotbook.models import StorageTarget
from lotbook.parsers.storage_targets import StorageTargetsParser
from lotbook.utils.logging import get_logger
from lotbook.utils.strings import normalize_variety, upper_clean

logger = get_logger("lookups")

_TARGET_KIND = {
    StorageKind.DIRECT_KUNCHINITTU: TargetKind.KUNCHINITTU,
    StorageKind.DIRECT_OUTTURN: TargetKind.OUTTURN,
}


def varieties_match(a: str, b: str) -> bool:
    return normalize_variety(a) == normalize_variety(b)


def find_storage_target(kind: StorageKind, target_id) -> Optional[StorageTarget]:
    """
    WAREHOUSE needs no target. Direct kinds need an active target of the
    matching master (kunchinittu for DIRECT_KUNCHINITTU, outturn for DIRECT_OUTTURN).
    """
    kind = StorageKind(kind)
    if kind == StorageKind.WAREHOUSE:
        if target_id is not None:
            raise ValidationError("'storage_target_id' is not used for WAREHOUSE")
        return None

    if target_id is None:
        raise ValidationError(f"'storage_target_id' is required for {kind.value}")

    target = db.session.get(StorageTarget, target_id)
    if target is None or not target.active or target.kind != _TARGET_KIND[kind].value:
        raise ValidationError(f"{kind.value} target {target_id} does not exist")
    return target


def check_storage_target(kind: StorageKind, target_id, entry_variety: str) -> Optional[StorageTarget]:
    target = find_storage_target(kind, target_id)
    if target is not None and not varieties_match(target.variety, entry_variety):
        raise VarietyMismatch(
            f"{target.kind} {target.code} holds '{target.variety}', entry variety is '{entry_variety}'",
            {"target_id": target.id, "target_variety": target.variety, "entry_variety": entry_variety},
        )
    return target


def import_storage_targets(rows: Iterable[dict]) -> Dict[str, int]:
    """
    Upserts master rows {kind, code, variety[, active]} keyed by (kind, code).
    Commits once at the end.
    """
    created = 0
    updated = 0
    skipped = 0

    existing = {(t.kind, t.code): t for t in StorageTarget.query.all()}

    for r in rows:
        kind = upper_clean(r.get("kind"))
        code = upper_clean(r.get("code"))
        variety = str(r.get("variety") or "").strip()

        if kind not in (TargetKind.KUNCHINITTU.value, TargetKind.OUTTURN.value) or not code or not variety:
            skipped += 1
            continue

        active = r.get("active")
        active = True if active is None else bool(active)

        t = existing.get((kind, code))
        if t is None:
            t = StorageTarget(kind=kind, code=code, variety=variety, active=active)
            db.session.add(t)
            existing[(kind, code)] = t
            created += 1
        else:
            t.variety = variety
            t.active = active
            updated += 1

    db.session.commit()
    logger.info(f"Storage targets import created={created} updated={updated} skipped={skipped}")
    return {"created": created, "updated": updated, "skipped": skipped}


def import_storage_targets_file(path: str) -> Dict:
    """
    Kunchinittu / outturn master workbook -> upsert.
    A workbook whose header cannot be mapped is refused as a whole; single
    bad rows are skipped and listed under 'rejected'.
    """
    parser = StorageTargetsParser()
    meta = parser.sniff(path)
    if meta["errors"]:
        raise ValidationError(meta["errors"])

    try:
        rows = parser.parse(path)
    except ValueError as e:
        raise ValidationError(str(e))

    result = import_storage_targets(rows)
    result["skipped"] += len(parser.rejected)
    result["rejected"] = parser.rejected
    logger.info(f"Storage targets workbook {path} sheet={meta.get('sheet_used')} rejected={len(parser.rejected)}")
    return result
