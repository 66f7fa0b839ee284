"""Admin CSV exports for delivery routes and pickup lists."""

from datetime import date

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from bakery.core.security import require_admin
from bakery.db.session import get_db
from bakery.models import User
from bakery.services.audit_service import log_action
from bakery.services.exports import delivery_routes_csv, pickup_list_csv

router: APIRouter = APIRouter()


def _csv_response(filename: str, content: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/delivery-routes.csv")
def export_delivery_routes(
    date: date,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Response:
    filename, content = delivery_routes_csv(db, date)
    log_action(db, actor=admin, action_type="export_delivery_routes", after_snapshot={"date": date.isoformat()})
    db.commit()
    return _csv_response(filename, content)


@router.get("/pickup-list.csv")
def export_pickup_list(
    date: date,
    location_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Response:
    filename, content = pickup_list_csv(db, date, location_id)
    log_action(
        db,
        actor=admin,
        action_type="export_pickup_list",
        after_snapshot={"date": date.isoformat(), "location_id": location_id},
    )
    db.commit()
    return _csv_response(filename, content)
