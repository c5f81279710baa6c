from sqlalchemy import Column, Float, ForeignKey, Integer, Text, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Locations(Base):
    __tablename__ = 'locations'

    name = Column(Text, nullable=False)
    address = Column(Text, nullable=False, server_default=text("''"))
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    # JSON: {"weekly": {...}, "exceptions": [...]}
    schedule = Column(Text, nullable=False, server_default=text("'{}'"))
    id = Column(Integer, primary_key=True)
    phone = Column(Text)
    whatsapp = Column(Text)
    color = Column(Text)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    bookings = relationship('Bookings', back_populates='location')
    booking_days = relationship('BookingDays', back_populates='location')


class Services(Base):
    __tablename__ = 'services'

    name = Column(Text, nullable=False)
    duration_minutes = Column(Integer, nullable=False, server_default=text('30'))
    price = Column(Float, nullable=False, server_default=text('0'))
    # JSON list of location ids, "[]" = every location
    allowed_location_ids = Column(Text, nullable=False, server_default=text("'[]'"))
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    description = Column(Text)
    display_price = Column(Integer, nullable=False, server_default=text('1'))

    bookings = relationship('Bookings', back_populates='service')


class Bookings(Base):
    __tablename__ = 'bookings'

    location_id = Column(ForeignKey('locations.id'), nullable=False)
    service_id = Column(ForeignKey('services.id', ondelete='SET NULL'))
    client_name = Column(Text, nullable=False)
    date = Column(Text, nullable=False)  # YYYY-MM-DD
    time = Column(Text, nullable=False)  # HH:MM
    duration_minutes = Column(Integer)
    status = Column(Text, nullable=False, server_default=text("'pending_approval'"))
    version = Column(Integer, nullable=False, server_default=text('0'))
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    id = Column(Integer, primary_key=True)
    client_phone = Column(Text)
    service_name = Column(Text)
    notes = Column(Text)

    location = relationship('Locations', back_populates='bookings')
    service = relationship('Services', back_populates='bookings')


class BookingDays(Base):
    """Version counter of the approved set for one (location, date)."""
    __tablename__ = 'booking_days'

    location_id = Column(ForeignKey('locations.id', ondelete='CASCADE'), primary_key=True)
    date = Column(Text, primary_key=True)
    version = Column(Integer, nullable=False, server_default=text('0'))

    location = relationship('Locations', back_populates='booking_days')
