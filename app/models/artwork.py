from sqlalchemy import String, Integer, Text, DateTime, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.core.database import Base, utcnow
from datetime import datetime
from typing import List, Optional, TYPE_CHECKING
import enum

if TYPE_CHECKING:
    from app.models.media import Media
    from app.models.user import User

MAX_TITLE_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 1000

class VisibilityType(str, enum.Enum):
    PRIVATE = "private"
    PUBLIC = "public"

VISIBILITY_ENUM = Enum(
    VisibilityType,
    name="visibility_type",
    native_enum=True,
    values_callable=lambda enum_cls: [e.value for e in enum_cls],
)

class Artwork(Base):
    __tablename__ = "artworks"
    __table_args__ = (
        CheckConstraint("favorite_count >= 0", name="artworks_favorite_count_check"),
        CheckConstraint("view_count >= 0", name="artworks_view_count_check"),
    )

    artwork_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(MAX_TITLE_LENGTH), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    glb_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    visibility: Mapped[VisibilityType] = mapped_column(VISIBILITY_ENUM, nullable=False)
    favorite_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    owner: Mapped["User"] = relationship("User", lazy="selectin")
    media: Mapped[List["Media"]] = relationship(
        "Media",
        lazy="selectin",
        order_by="Media.media_id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __init__(
        self,
        user_id: int,
        title: str,
        glb_url: str,
        description: Optional[str] = None,
        thumbnail_url: Optional[str] = None,
    ):
        self.user_id = user_id
        self.title = title
        self.glb_url = glb_url
        self.description = description
        self.thumbnail_url = thumbnail_url
        # New artworks always start private
        self.visibility = VisibilityType.PRIVATE
        self.favorite_count = 0
        self.view_count = 0
        self.created_at = self.updated_at = utcnow()

    def is_public(self) -> bool:
        return self.visibility == VisibilityType.PUBLIC

    def is_owned_by(self, user_id: Optional[int]) -> bool:
        return user_id is not None and self.user_id == user_id

    def change_visibility(self, visibility: VisibilityType):
        self.visibility = visibility
        self.updated_at = utcnow()
