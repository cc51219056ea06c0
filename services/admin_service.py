"""
Administración de tenants, sucursales y usuarios
"""
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import DEFAULT_MAX_BRANCHES, DEFAULT_MAX_USERS
from models.enums import EntityStatus, UserRole
from models.tenant import Branch, Tenant
from models.user import User
from schemas.admin import BranchCreate, BranchUpdate, TenantCreate, TenantUpdate, UserCreate, UserUpdate
from services.activity_log_service import ActivityLogService
from utils.auth import get_password_hash
from utils.logging_utils import log_event


def _lock_tenant(db: Session, tenant_id: int) -> Optional[Tenant]:
    return (
        db.query(Tenant)
        .filter(Tenant.id == tenant_id)
        .with_for_update()
        .populate_existing()
        .first()
    )


def _active_branch_count(db: Session, tenant_id: int) -> int:
    return (
        db.query(func.count(Branch.id))
        .filter(Branch.tenant_id == tenant_id, Branch.status == EntityStatus.ACTIVE)
        .scalar()
    )


def _active_user_count(db: Session, tenant_id: int) -> int:
    return (
        db.query(func.count(User.id))
        .filter(User.tenant_id == tenant_id, User.status == EntityStatus.ACTIVE)
        .scalar()
    )


def _is_restore(current_status: EntityStatus, data: dict) -> bool:
    return current_status == EntityStatus.ARCHIVED and data.get("status") == EntityStatus.ACTIVE


class TenantService:

    @staticmethod
    def create_tenant(db: Session, sysad_user_id: int, payload: TenantCreate) -> Tuple[bool, str, Optional[Tenant]]:
        try:
            data = payload.model_dump()
            data["max_branch_count"] = data.get("max_branch_count") or DEFAULT_MAX_BRANCHES
            data["max_user_count"] = data.get("max_user_count") or DEFAULT_MAX_USERS
            tenant = Tenant(**data)
            db.add(tenant)
            db.flush()
            ActivityLogService.record(
                db,
                tenant_id=tenant.id,
                actor_user_id=sysad_user_id,
                action_type="SYSAD_CREATED_TENANT",
                description=f"Tenant '{tenant.tenant_name}' created.",
                target_entity_type="Tenant",
                target_entity_id=tenant.id,
            )
            db.commit()
            db.refresh(tenant)
            log_event("admin", sysad_user_id, "Create tenant", f"tenant_id={tenant.id}")
            return True, "Tenant created successfully.", tenant
        except Exception as e:
            db.rollback()
            error_msg = f"Database error while creating tenant: {e}"
            log_event("admin", sysad_user_id, "Error", error_msg)
            return False, error_msg, None

    @staticmethod
    def update_tenant(db: Session, tenant_id: int, sysad_user_id: int, payload: TenantUpdate) -> Tuple[bool, str, Optional[Tenant]]:
        try:
            tenant = db.query(Tenant).filter(Tenant.id == tenant_id).first()
            if not tenant:
                db.rollback()
                return False, "Tenant not found.", None
            for field, value in payload.model_dump(exclude_unset=True).items():
                setattr(tenant, field, value)
            ActivityLogService.record(
                db,
                tenant_id=tenant.id,
                actor_user_id=sysad_user_id,
                action_type="SYSAD_UPDATED_TENANT",
                description=f"Tenant '{tenant.tenant_name}' updated.",
                target_entity_type="Tenant",
                target_entity_id=tenant.id,
                details={"updated_fields": sorted(payload.model_fields_set)},
            )
            db.commit()
            db.refresh(tenant)
            log_event("admin", sysad_user_id, "Update tenant", f"tenant_id={tenant.id}")
            return True, "Tenant updated successfully.", tenant
        except Exception as e:
            db.rollback()
            error_msg = f"Database error while updating tenant: {e}"
            log_event("admin", sysad_user_id, "Error", error_msg)
            return False, error_msg, None

    @staticmethod
    def archive_tenant(db: Session, tenant_id: int, sysad_user_id: int) -> Tuple[bool, str, Optional[Tenant]]:
        return TenantService.update_tenant(db, tenant_id, sysad_user_id, TenantUpdate(status=EntityStatus.ARCHIVED))

    @staticmethod
    def list_tenants(db: Session, include_archived: bool = False) -> List[Tenant]:
        query = db.query(Tenant)
        if not include_archived:
            query = query.filter(Tenant.status != EntityStatus.ARCHIVED)
        return query.order_by(Tenant.tenant_name.asc()).all()

    @staticmethod
    def get_tenant(db: Session, tenant_id: int) -> Optional[Tenant]:
        return db.query(Tenant).filter(Tenant.id == tenant_id).first()


class BranchService:

    @staticmethod
    def create_branch(db: Session, tenant_id: int, user_id: int, payload: BranchCreate) -> Tuple[bool, str, Optional[Branch]]:
        """Se rechaza cuando las sucursales activas del tenant llegan a max_branch_count"""
        try:
            tenant = _lock_tenant(db, tenant_id)
            if not tenant or tenant.status != EntityStatus.ACTIVE:
                db.rollback()
                return False, "Tenant not found or is not active.", None

            if _active_branch_count(db, tenant_id) >= tenant.max_branch_count:
                db.rollback()
                return (
                    False,
                    f"Branch limit ({tenant.max_branch_count}) reached for tenant '{tenant.tenant_name}'. "
                    "Cannot create more active branches.",
                    None,
                )

            branch = Branch(tenant_id=tenant_id, **payload.model_dump())
            db.add(branch)
            db.flush()
            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=branch.id,
                actor_user_id=user_id,
                action_type="CREATED_BRANCH",
                description=f"Branch '{branch.branch_name}' ({branch.branch_code}) created.",
                target_entity_type="Branch",
                target_entity_id=branch.id,
            )
            db.commit()
            db.refresh(branch)
            log_event("admin", user_id, "Create branch", f"tenant_id={tenant_id}, branch_id={branch.id}")
            return True, "Branch created successfully.", branch
        except IntegrityError:
            db.rollback()
            return False, "Branch code already exists for this tenant.", None
        except Exception as e:
            db.rollback()
            error_msg = f"Database error while creating branch: {e}"
            log_event("admin", user_id, "Error", error_msg)
            return False, error_msg, None

    @staticmethod
    def update_branch(
        db: Session, tenant_id: int, branch_id: int, user_id: int, payload: BranchUpdate
    ) -> Tuple[bool, str, Optional[Branch]]:
        try:
            branch = db.query(Branch).filter(Branch.id == branch_id, Branch.tenant_id == tenant_id).first()
            if not branch:
                db.rollback()
                return False, "Branch not found.", None

            data = payload.model_dump(exclude_unset=True)
            if _is_restore(branch.status, data):
                tenant = _lock_tenant(db, tenant_id)
                if tenant.max_branch_count and _active_branch_count(db, tenant_id) >= tenant.max_branch_count:
                    db.rollback()
                    return (
                        False,
                        f"Cannot restore branch. Branch limit ({tenant.max_branch_count}) reached "
                        f"for tenant '{tenant.tenant_name}'.",
                        None,
                    )
            for field, value in data.items():
                setattr(branch, field, value)
            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=branch.id,
                actor_user_id=user_id,
                action_type="UPDATED_BRANCH",
                description=f"Branch '{branch.branch_name}' updated.",
                target_entity_type="Branch",
                target_entity_id=branch.id,
                details={"updated_fields": sorted(payload.model_fields_set)},
            )
            db.commit()
            db.refresh(branch)
            log_event("admin", user_id, "Update branch", f"branch_id={branch.id}")
            return True, "Branch updated successfully.", branch
        except Exception as e:
            db.rollback()
            error_msg = f"Database error while updating branch: {e}"
            log_event("admin", user_id, "Error", error_msg)
            return False, error_msg, None

    @staticmethod
    def archive_branch(db: Session, tenant_id: int, branch_id: int, user_id: int) -> Tuple[bool, str, Optional[Branch]]:
        return BranchService.update_branch(db, tenant_id, branch_id, user_id, BranchUpdate(status=EntityStatus.ARCHIVED))

    @staticmethod
    def list_branches_for_tenant(db: Session, tenant_id: int, include_archived: bool = False) -> List[Branch]:
        query = db.query(Branch).filter(Branch.tenant_id == tenant_id)
        if not include_archived:
            query = query.filter(Branch.status == EntityStatus.ACTIVE)
        return query.order_by(Branch.branch_name.asc()).all()


class UserService:

    @staticmethod
    def create_user(db: Session, actor_user_id: int, payload: UserCreate) -> Tuple[bool, str, Optional[User]]:
        """Guarda un hash bcrypt, nunca el password. Los usuarios del tenant cuentan contra max_user_count"""
        try:
            if db.query(User.id).filter(User.username == payload.username).first():
                db.rollback()
                return False, "Username already exists.", None

            tenant = None
            if payload.tenant_id is not None:
                tenant = _lock_tenant(db, payload.tenant_id)
                if not tenant or tenant.status != EntityStatus.ACTIVE:
                    db.rollback()
                    return False, "Tenant not found or is not active.", None

                if _active_user_count(db, tenant.id) >= tenant.max_user_count:
                    db.rollback()
                    return (
                        False,
                        f"User limit ({tenant.max_user_count}) reached for tenant '{tenant.tenant_name}'. "
                        "Cannot create more active users.",
                        None,
                    )

            if payload.tenant_branch_id is not None:
                branch = db.query(Branch).filter(
                    Branch.id == payload.tenant_branch_id,
                    Branch.tenant_id == payload.tenant_id,
                ).first()
                if not branch:
                    db.rollback()
                    return False, "Branch not found for this tenant.", None

            user = User(
                first_name=payload.first_name,
                last_name=payload.last_name,
                username=payload.username,
                password_hash=get_password_hash(payload.password),
                email=payload.email,
                role=payload.role,
                tenant_id=None if payload.role == UserRole.SYSAD else payload.tenant_id,
                tenant_branch_id=payload.tenant_branch_id,
            )
            db.add(user)
            db.flush()
            ActivityLogService.record(
                db,
                tenant_id=user.tenant_id,
                branch_id=user.tenant_branch_id,
                actor_user_id=actor_user_id,
                action_type="CREATED_USER",
                description=f"User '{user.username}' created with role {user.role.value}.",
                target_entity_type="User",
                target_entity_id=user.id,
            )
            db.commit()
            db.refresh(user)
            log_event("admin", actor_user_id, "Create user", f"username={user.username}")
            return True, "User created successfully.", user
        except IntegrityError:
            db.rollback()
            return False, "Username already exists.", None
        except Exception as e:
            db.rollback()
            error_msg = f"Database error while creating user: {e}"
            log_event("admin", actor_user_id, "Error", error_msg)
            return False, error_msg, None

    @staticmethod
    def update_user(
        db: Session, user_id: int, actor_user_id: int, payload: UserUpdate, tenant_id: Optional[int] = None
    ) -> Tuple[bool, str, Optional[User]]:
        """tenant_id restringe la búsqueda para admins del tenant; sysad pasa None"""
        try:
            query = db.query(User).filter(User.id == user_id)
            if tenant_id is not None:
                query = query.filter(User.tenant_id == tenant_id)
            user = query.first()
            if not user:
                db.rollback()
                return False, "User not found.", None

            data = payload.model_dump(exclude_unset=True)
            if data.get("tenant_branch_id") is not None:
                branch = db.query(Branch).filter(
                    Branch.id == data["tenant_branch_id"], Branch.tenant_id == user.tenant_id
                ).first()
                if not branch:
                    db.rollback()
                    return False, "Branch not found for this tenant.", None
            if user.tenant_id is not None and _is_restore(user.status, data):
                tenant = _lock_tenant(db, user.tenant_id)
                if tenant.max_user_count and _active_user_count(db, user.tenant_id) >= tenant.max_user_count:
                    db.rollback()
                    return (
                        False,
                        f"User limit ({tenant.max_user_count}) reached. "
                        "To restore this user, archive another active user first.",
                        None,
                    )
            for field, value in data.items():
                setattr(user, field, value)

            ActivityLogService.record(
                db,
                tenant_id=user.tenant_id,
                branch_id=user.tenant_branch_id,
                actor_user_id=actor_user_id,
                action_type="UPDATED_USER",
                description=f"User '{user.username}' updated.",
                target_entity_type="User",
                target_entity_id=user.id,
                details={"updated_fields": sorted(data)},
            )
            db.commit()
            db.refresh(user)
            log_event("admin", actor_user_id, "Update user", f"user_id={user.id}")
            return True, "User updated successfully.", user
        except Exception as e:
            db.rollback()
            error_msg = f"Database error while updating user: {e}"
            log_event("admin", actor_user_id, "Error", error_msg)
            return False, error_msg, None

    @staticmethod
    def archive_user(db: Session, user_id: int, actor_user_id: int, tenant_id: Optional[int] = None) -> Tuple[bool, str, Optional[User]]:
        if user_id == actor_user_id:
            return False, "You cannot archive your own account.", None
        return UserService.update_user(db, user_id, actor_user_id, UserUpdate(status=EntityStatus.ARCHIVED), tenant_id)

    @staticmethod
    def reset_password(
        db: Session, user_id: int, actor_user_id: int, new_password: str, tenant_id: Optional[int] = None
    ) -> Tuple[bool, str, Optional[User]]:
        try:
            query = db.query(User).filter(User.id == user_id)
            if tenant_id is not None:
                query = query.filter(User.tenant_id == tenant_id)
            user = query.first()
            if not user:
                db.rollback()
                return False, "User not found.", None

            user.password_hash = get_password_hash(new_password)
            ActivityLogService.record(
                db,
                tenant_id=user.tenant_id,
                branch_id=user.tenant_branch_id,
                actor_user_id=actor_user_id,
                action_type="RESET_USER_PASSWORD",
                description=f"Password reset for user '{user.username}'.",
                target_entity_type="User",
                target_entity_id=user.id,
            )
            db.commit()
            db.refresh(user)
            log_event("admin", actor_user_id, "Reset password", f"user_id={user.id}")
            return True, "Password reset successfully.", user
        except Exception as e:
            db.rollback()
            error_msg = f"Database error while resetting password: {e}"
            log_event("admin", actor_user_id, "Error", error_msg)
            return False, error_msg, None

    @staticmethod
    def list_users(db: Session, tenant_id: Optional[int] = None, include_archived: bool = False) -> List[User]:
        query = db.query(User)
        if tenant_id is not None:
            query = query.filter(User.tenant_id == tenant_id)
        if not include_archived:
            query = query.filter(User.status == EntityStatus.ACTIVE)
        return query.order_by(User.last_name.asc(), User.first_name.asc()).all()
