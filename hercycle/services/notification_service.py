from datetime import datetime, timezone
from sqlalchemy.orm import Session
from hercycle.models.notification import Notification
from hercycle.utils.errors import NotFoundError


class NotificationService:
    @staticmethod
    def create(
        db: Session,
        user_id: int,
        notification_type: str,
        title: str,
        body: str,
        related_entity_type: str | None = None,
        related_entity_id: str | None = None,
    ) -> Notification:
        """Stage an in-app notification; the caller owns the commit."""
        notification = Notification(
            user_id=user_id,
            notification_type=notification_type,
            title=title,
            body=body,
            related_entity_type=related_entity_type,
            related_entity_id=related_entity_id,
        )
        db.add(notification)
        return notification

    @staticmethod
    def list_for_user(db: Session, user_id: int, unread_only: bool = False) -> list[Notification]:
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read == False)
        return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()

    @staticmethod
    def mark_read(db: Session, user_id: int, notification_id: int) -> Notification:
        notification = (
            db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .first()
        )
        if not notification:
            raise NotFoundError("Notification not found")
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.now(timezone.utc).replace(tzinfo=None)
            db.commit()
            db.refresh(notification)
        return notification

    @staticmethod
    def mark_all_read(db: Session, user_id: int) -> int:
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        updated = (
            db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read == False)
            .update({Notification.is_read: True, Notification.read_at: now}, synchronize_session=False)
        )
        db.commit()
        return updated

    @staticmethod
    def clear(db: Session, user_id: int) -> int:
        deleted = (
            db.query(Notification)
            .filter(Notification.user_id == user_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted
