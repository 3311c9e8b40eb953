from sqlalchemy import Boolean, Column, ForeignKey, Index, String, text
from sqlalchemy.orm import relationship

from .base import Base, TenantScopedMixin


class User(Base, TenantScopedMixin):
    __tablename__ = 'user'
    __table_args__ = (
        Index('user_email_key', 'email', unique=True,
              postgresql_where=text("NOT deleted"), sqlite_where=text("deleted = 0")),
    )

    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False)
    password = Column(String(255))
    phone_number = Column(String(64))
    profile_image_url = Column(String(2048))
    is_active = Column(Boolean, nullable=False, default=True)

    user_roles = relationship("UserRole", back_populates="user", cascade="all, delete-orphan", lazy="select")

    @property
    def roles(self):
        return [user_role.role for user_role in self.user_roles if not user_role.role.deleted]

    @property
    def role_ids(self) -> list[str]:
        return [user_role.role_id for user_role in self.user_roles]


class Role(Base, TenantScopedMixin):
    __tablename__ = 'role'
    __table_args__ = (
        Index('role_tenant_name_key', 'tenant_id', 'name', unique=True,
              postgresql_where=text("NOT deleted"), sqlite_where=text("deleted = 0")),
    )

    name = Column(String(255), nullable=False)
    description = Column(String(4096))
    is_default = Column(Boolean, nullable=False, default=False)

    role_permissions = relationship('RolePermission', back_populates='role', cascade='all, delete-orphan', lazy="selectin")
    user_roles = relationship('UserRole', back_populates='role')

    @property
    def permissions(self) -> list[str]:
        return sorted({rp.permission for rp in self.role_permissions})

    @permissions.setter
    def permissions(self, values):
        wanted = set(values or [])
        self.role_permissions = [rp for rp in self.role_permissions if rp.permission in wanted]
        present = {rp.permission for rp in self.role_permissions}
        for permission in sorted(wanted - present):
            self.role_permissions.append(RolePermission(permission=permission))


class RolePermission(Base):
    __tablename__ = 'role_permission'

    role_id = Column(ForeignKey('role.id', ondelete='CASCADE'), primary_key=True, nullable=False)
    permission = Column(String(255), primary_key=True, nullable=False)

    role = relationship('Role', back_populates='role_permissions')


class UserRole(Base):
    __tablename__ = 'user_role'

    user_id = Column(ForeignKey('user.id', ondelete='CASCADE'), primary_key=True, nullable=False)
    role_id = Column(ForeignKey('role.id', ondelete='RESTRICT', onupdate='CASCADE'), primary_key=True, nullable=False)

    role = relationship('Role', back_populates='user_roles')
    user = relationship('User', back_populates='user_roles')
