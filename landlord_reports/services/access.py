"""
Access scoping for reports.

Admins see every property. Managers see the properties whose manager_id is
their user id, and an explicit propertyId from a manager must be one of
them. Every bulk report query is narrowed through ReportScope.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Query, Session

from landlord_reports.core.auth import CurrentUser
from landlord_reports.core.errors import AccessDenied
from landlord_reports.models.property import Property

logger = logging.getLogger(__name__)

# Query-string serialization artifacts from the dashboard
_MISSING_IDS = {"", "null", "undefined"}


def normalize_property_id(value) -> Optional[str]:
    """Map None / "" / "null" / "undefined" to None; anything else to a string id."""
    if value is None:
        return None
    text = str(value).strip()
    if text in _MISSING_IDS:
        return None
    return text


@dataclass(frozen=True)
class ReportScope:
    """Which properties a report may read. None means "not restricted on this axis"."""
    property_id: Optional[str] = None
    manager_id: Optional[str] = None

    def filter_properties(self, q: Query, prop=Property) -> Query:
        """Narrow a query that already joins `prop` (Property or an alias of it)."""
        if self.property_id is not None:
            q = q.filter(prop.id == self.property_id)
        if self.manager_id is not None:
            q = q.filter(prop.manager_id == self.manager_id)
        return q


def resolve_scope(db: Session, current_user: CurrentUser, property_id=None) -> ReportScope:
    """
    Decide what `current_user` may see for an optional `property_id`.

    Raises:
        AccessDenied: a manager asked for a property that does not exist
            or is assigned to someone else
    """
    property_id = normalize_property_id(property_id)

    if not current_user.is_manager:
        return ReportScope(property_id=property_id)

    if property_id is not None:
        prop = db.get(Property, property_id)
        # ids may come in as int or uuid depending on the client; compare as strings
        if prop is None or str(prop.manager_id) != str(current_user.id):
            logger.warning(
                "Access denied: property=%s owner=%s caller=%s",
                property_id,
                prop.manager_id if prop is not None else None,
                current_user.id,
            )
            raise AccessDenied()

    return ReportScope(property_id=property_id, manager_id=current_user.id)
