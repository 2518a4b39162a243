# app/services/anomaly_service.py
"""
Anomaly rule lifecycle: create, list, update, delete.

Every operation is scoped to the caller's organization. Input is validated
before anything is written; each mutation runs as a single transaction so a
failure never leaves a rule without its cameras (or cameras without a rule).
"""

from sqlalchemy.orm import Session

from app.config import settings
from app.constants import CRITICALITY_LEVELS, RULE_STATUSES
from app.database import transaction
from app.exceptions import InvalidInputError
from app.models.anomaly import AnomalyRule
from app.repositories.anomaly_repository import AnomalyRepository
from app.services.association_manager import bind_cameras, unbind_all
from app.services.ownership_guard import resolve_owned_cameras, resolve_owned_rule
from app.services.schedule_validator import validate_required_fields, validate_schedule
from app.utils.logger import get_logger

logger = get_logger(__name__)

TEXT_FIELDS = ("title", "description", "model_name")
SCHEDULE_FIELDS = ("days_of_week", "start_time", "end_time")


def _validate_camera_ids(camera_ids) -> list[int]:
    if not isinstance(camera_ids, (list, tuple)) or len(camera_ids) == 0:
        raise InvalidInputError("cameraIds must be a non-empty array")
    if not all(isinstance(cid, int) and not isinstance(cid, bool) for cid in camera_ids):
        raise InvalidInputError("cameraIds must contain integer camera ids")
    return list(camera_ids)


def _validate_text(value, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{field} must be a non-empty string")
    return value


def _validate_choice(value, allowed, field: str) -> str:
    if value not in allowed:
        raise InvalidInputError(f"Invalid {field} '{value}'; allowed: {', '.join(allowed)}")
    return value


def create_anomaly(db: Session, organization_id: int, fields: dict) -> AnomalyRule:
    """
    Create a rule and bind its cameras.
    Raises MissingFieldError, InvalidInputError or NotFoundOrForbiddenError;
    nothing is persisted on any failure.
    """
    validate_required_fields(fields)
    for name in TEXT_FIELDS:
        _validate_text(fields[name], name)

    camera_ids = _validate_camera_ids(fields["camera_ids"])
    if not isinstance(fields["days_of_week"], (list, tuple)):
        raise InvalidInputError("daysOfWeek must be an array")

    days, start_time, end_time = validate_schedule(
        fields["days_of_week"], fields["start_time"], fields["end_time"]
    )
    criticality = _validate_choice(
        fields.get("criticality") or settings.DEFAULT_CRITICALITY, CRITICALITY_LEVELS, "criticality"
    )

    repo = AnomalyRepository(db)
    with transaction(db):
        cameras = resolve_owned_cameras(db, organization_id, camera_ids)
        rule = repo.add_rule(AnomalyRule(
            organization_id=organization_id,
            title=fields["title"],
            description=fields["description"],
            criticality=criticality,
            model_name=fields["model_name"],
            start_time=start_time,
            end_time=end_time,
            days_of_week=days,
            status="active",
        ))
        bind_cameras(db, rule, cameras)

    logger.info(f"[ANOMALY] org={organization_id} created rule {rule.id} "
                f"'{rule.title}' on cameras {[c.id for c in cameras]}")
    return rule


def list_anomalies(db: Session, organization_id: int) -> list[AnomalyRule]:
    return AnomalyRepository(db).list_rules(organization_id)


def _validated_changes(rule: AnomalyRule, supplied: dict) -> dict:
    """Check every supplied field and return the column values to apply."""
    changes = {}
    for name in TEXT_FIELDS:
        if name in supplied:
            changes[name] = _validate_text(supplied[name], name)
    if "criticality" in supplied:
        changes["criticality"] = _validate_choice(supplied["criticality"], CRITICALITY_LEVELS, "criticality")
    if "status" in supplied:
        changes["status"] = _validate_choice(supplied["status"], RULE_STATUSES, "status")

    if any(name in supplied for name in SCHEDULE_FIELDS):
        days, start_time, end_time = validate_schedule(
            supplied.get("days_of_week", rule.days_of_week),
            supplied.get("start_time", rule.start_time),
            supplied.get("end_time", rule.end_time),
        )
        changes.update(days_of_week=days, start_time=start_time, end_time=end_time)
    return changes


def update_anomaly(db: Session, organization_id: int, rule_id: int, fields: dict) -> AnomalyRule:
    """
    Partial update: fields that are absent or None keep their stored value.
    A supplied camera set replaces the current one entirely.
    """
    supplied = {name: value for name, value in fields.items() if value is not None}

    with transaction(db):
        rule = resolve_owned_rule(db, organization_id, rule_id, for_update=True)
        changes = _validated_changes(rule, supplied)

        if "camera_ids" in supplied:
            camera_ids = _validate_camera_ids(supplied["camera_ids"])
            cameras = resolve_owned_cameras(db, organization_id, camera_ids)
            bind_cameras(db, rule, cameras)

        for name, value in changes.items():
            setattr(rule, name, value)

    logger.info(f"[ANOMALY] org={organization_id} updated rule {rule_id}: "
                f"{sorted(list(changes) + (['cameras'] if 'camera_ids' in supplied else []))}")
    return rule


def delete_anomaly(db: Session, organization_id: int, rule_id: int) -> int:
    """Unbind all cameras, detach alert history, then delete the rule row."""
    repo = AnomalyRepository(db)
    with transaction(db):
        rule = resolve_owned_rule(db, organization_id, rule_id, for_update=True)
        unbind_all(db, rule)
        detached = repo.detach_alerts_from_rule(rule)
        repo.delete_rule(rule)

    logger.info(f"[ANOMALY] org={organization_id} deleted rule {rule_id} ({detached} alerts detached)")
    return rule_id
