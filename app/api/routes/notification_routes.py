"""
Notification Routes

GET /notifications - Own notifications (filters: type, is_read, priority)
PUT /notifications/mark-all-read - Mark every own notification read
PUT /notifications/{notification_id}/read - Mark one read
DELETE /notifications/{notification_id} - Delete one
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pymongo.database import Database

from app.db.mongodb import get_db
from app.core.auth import get_current_user
from app.schemas.schemas import NotificationPriority, NotificationType
from app.services.notification_service import NotificationService
from app.utils.responses import PageParams, api_success, build_pagination

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("")
async def list_notifications(
    page: PageParams = Depends(),
    type: Optional[NotificationType] = Query(None),
    is_read: Optional[bool] = Query(None),
    priority: Optional[NotificationPriority] = Query(None),
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    service = NotificationService(db)
    notifications, total = service.list_for_user(
        user["user_id"], page.skip, page.limit,
        type=type.value if type else None,
        is_read=is_read,
        priority=priority.value if priority else None,
    )
    data = {"notifications": notifications, "unread_count": service.unread_count(user["user_id"])}
    return api_success(data, "Notifications fetched successfully", build_pagination(total, page))


@router.put("/mark-all-read")
async def mark_all_read(user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    updated = NotificationService(db).mark_all_as_read(user["user_id"])
    return api_success({"updated": updated}, "All notifications marked as read")


@router.put("/{notification_id}/read")
async def mark_read(notification_id: str, user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    notification = NotificationService(db).mark_as_read(user["user_id"], notification_id)
    return api_success(notification, "Notification marked as read")


@router.delete("/{notification_id}")
async def delete_notification(notification_id: str, user: dict = Depends(get_current_user),
                              db: Database = Depends(get_db)):
    NotificationService(db).delete(user["user_id"], notification_id)
    return api_success(message="Notification deleted")
