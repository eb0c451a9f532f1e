# agencydesk/models.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import declarative_base
from datetime import datetime

Base = declarative_base()

# Amounts and percentages are stored as decimal strings, exactly as received.


class Agent(Base):
    __tablename__ = 'agents'
    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(191))
    phone = Column(String(32))
    license_number = Column(String(64))
    license_expiration = Column(String(32))
    commission_percentage = Column(String(16), default='70.00')
    override_percentage = Column(String(16))
    upline_agent_id = Column(Integer, ForeignKey('agents.id', ondelete='SET NULL'), index=True)
    bank_name = Column(String(191))
    bank_account_type = Column(String(16))
    bank_account_number = Column(String(64))
    bank_routing_number = Column(String(32))
    bank_payment_method = Column(String(32), default='direct_deposit')
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class Client(Base):
    __tablename__ = 'clients'
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(191), nullable=False)
    email = Column(String(191))
    phone = Column(String(32))
    status = Column(String(32))
    agent_id = Column(Integer, ForeignKey('agents.id', ondelete='SET NULL'), index=True)
    lead_id = Column(Integer, ForeignKey('leads.id', ondelete='SET NULL'), index=True)
    created_at = Column(DateTime, default=datetime.now)


class Lead(Base):
    __tablename__ = 'leads'
    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(191))
    phone = Column(String(32))
    status = Column(String(32))
    agent_id = Column(Integer, ForeignKey('agents.id', ondelete='SET NULL'), index=True)
    created_at = Column(DateTime, default=datetime.now)


class Policy(Base):
    __tablename__ = 'policies'
    __table_args__ = (UniqueConstraint('carrier', 'policy_number', name='ux_policies_carrier_number'),)
    id = Column(Integer, primary_key=True, autoincrement=True)
    policy_number = Column(String(100), nullable=False)
    carrier = Column(String(191), nullable=False)
    policy_type = Column(String(64), nullable=False)
    face_amount = Column(String(32))
    premium_amount = Column(String(32))
    premium_frequency = Column(String(16))
    issue_date = Column(String(32))
    expiry_date = Column(String(32))
    status = Column(String(16), nullable=False, default='pending')
    client_id = Column(Integer, ForeignKey('clients.id', ondelete='SET NULL'), index=True)
    lead_id = Column(Integer, ForeignKey('leads.id', ondelete='SET NULL'))
    agent_id = Column(Integer, ForeignKey('agents.id', ondelete='SET NULL'), index=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class Commission(Base):
    __tablename__ = 'commissions'
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(191))
    policy_number = Column(String(100), nullable=False)
    client_id = Column(Integer, index=True)
    broker_id = Column(Integer, index=True)
    amount = Column(String(32), nullable=False)
    status = Column(String(16), nullable=False, default='pending')
    type = Column(String(16), nullable=False, default='initial')
    policy_start_date = Column(String(32))
    policy_end_date = Column(String(32))
    payment_date = Column(String(32))
    carrier = Column(String(191))
    policy_type = Column(String(64))
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.now)


class User(Base):
    __tablename__ = 'users'
    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), nullable=False, unique=True)
    full_name = Column(String(191))
    email = Column(String(191))
    role = Column(String(32))


class Update(Base):
    __tablename__ = 'updates'
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(191), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(32), nullable=False, default='announcement')
    date = Column(String(32))
    link = Column(String(500))
    link_text = Column(String(191))
