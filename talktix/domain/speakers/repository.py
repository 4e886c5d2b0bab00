"""Speaker repository - Database operations for speakers"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Speaker


class SpeakerRepository:
    """Repository for speaker database operations"""

    @staticmethod
    def list_speakers(db: Session) -> list[Speaker]:
        return db.query(Speaker).order_by(Speaker.created_at.asc()).all()

    @staticmethod
    def get_speaker_by_id(db: Session, speaker_id: str) -> Optional[Speaker]:
        return db.query(Speaker).filter(Speaker.id == speaker_id).first()

    @staticmethod
    def get_speaker_by_email(db: Session, email: str) -> Optional[Speaker]:
        return db.query(Speaker).filter(Speaker.email == email).first()

    @staticmethod
    def create_speaker(db: Session, **speaker_data) -> Speaker:
        """Create a new speaker"""
        speaker = Speaker(**speaker_data)
        db.add(speaker)
        db.commit()
        db.refresh(speaker)
        return speaker

    @staticmethod
    def update_speaker(db: Session, speaker: Speaker, **updates) -> Speaker:
        """Update a speaker with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(speaker, key):
                setattr(speaker, key, value)

        db.commit()
        db.refresh(speaker)
        return speaker

    @staticmethod
    def delete_speaker(db: Session, speaker_id: str) -> None:
        """Stage the delete; the caller commits"""
        db.query(Speaker).filter(Speaker.id == speaker_id).delete(synchronize_session=False)
        db.flush()
