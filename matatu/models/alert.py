from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, ForeignKey, LargeBinary
from sqlalchemy.orm import deferred, relationship
from matatu.db.session import Base
from matatu.models.enums import AlertType, SeverityLevel
from matatu.utils.clock import utcnow

class DriverAlert(Base):
    __tablename__ = "driver_alerts"
    id = Column(Integer, primary_key=True, autoincrement=True)
    driver_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # plain strings in the column so that filtering by an unknown value is
    # a non-match instead of an enum coercion error
    alert_type = Column(Enum(AlertType, name="alert_type", native_enum=False, values_callable=lambda e: [m.value for m in e],
                             validate_strings=False), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    location_name = Column(String(255), nullable=False, index=True)
    severity_level = Column(Enum(SeverityLevel, name="severity_level", native_enum=False,
                                 values_callable=lambda e: [m.value for m in e]),
                            nullable=False, default=SeverityLevel.medium)
    image_data = deferred(Column(LargeBinary, nullable=True))  # loaded only by the image endpoint
    image_filename = Column(String(255), nullable=True)
    image_mimetype = Column(String(100), nullable=True)
    expiry_time = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    driver = relationship("User")

    @property
    def has_image(self) -> bool:
        return self.image_filename is not None

    def is_active(self, now) -> bool:
        return self.expiry_time is None or self.expiry_time > now
