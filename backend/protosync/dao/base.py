"""
Base Data Access Object (DAO) class.

WHY: The DAO pattern separates database operations from business logic.
BaseDAO is the single place where driver errors are translated into
application exceptions, where duplicate pre-checks run, and where
pagination is assembled, so every entity gets the same behaviour.
"""

import logging
import re
from typing import Any, Dict, Generic, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar, Union

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from protosync.core.exceptions import (
    AppException,
    DatabaseOperationError,
    DuplicateResourceError,
    ResourceNotFoundError,
    ValidationError,
)
from protosync.middleware.request_context import current_request_id
from protosync.models.base import Base, RecordValidationError, normalize_id

logger = logging.getLogger(__name__)

# Type variable for model class
ModelType = TypeVar("ModelType", bound=Base)

# (field, value) pairs that must not already exist in the store
DuplicateChecks = Sequence[Tuple[str, Any]]
Populate = Optional[Union[str, Sequence[str]]]

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
DEFAULT_SORT: Dict[str, int] = {"created_at": -1}

# PostgreSQL: Key (email)=(a@example.com) already exists.
_PG_DUPLICATE_KEY = re.compile(r"Key \((?P<field>[^)]+)\)=\((?P<value>[^)]*)\)")
# SQLite: UNIQUE constraint failed: users.email
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: \w+\.(?P<field>\w+)")


class BaseDAO(Generic[ModelType]):
    """
    Base Data Access Object providing CRUD operations for all models.

    WHY: Every operation is parameterized by the injected session (the
    store handle), the model class, and a resource name used in error
    messages. Errors leave this class only as AppException subclasses.

    Type Parameters:
        ModelType: The SQLAlchemy model class this DAO manages
    """

    def __init__(
        self,
        model: Type[ModelType],
        session: AsyncSession,
        resource_name: Optional[str] = None,
    ):
        """
        Initialize DAO with model class and database session.

        Args:
            model: The SQLAlchemy model class
            session: Async database session
            resource_name: Name used in error messages (defaults to model name)
        """
        self.model = model
        self.session = session
        self.resource_name = resource_name or model.__name__

    # =========================================================================
    # Helpers
    # =========================================================================

    def validate_id(self, id: Any) -> str:
        """
        Ensure ``id`` is a well-formed identifier.

        Returns:
            The identifier in its stored (canonical) form

        Raises:
            ValidationError: If the identifier is malformed
        """
        canonical = normalize_id(id)
        if canonical is None:
            raise ValidationError.for_field(
                "id", f"Invalid {self.resource_name.lower()} ID format", id
            )
        return canonical

    def _column(self, field: str):
        if not hasattr(self.model, field):
            raise AttributeError(f"{self.model.__name__} has no field '{field}'")
        return getattr(self.model, field)

    def _conditions(self, filters: Optional[Mapping[str, Any]]) -> List[Any]:
        return [self._column(field) == value for field, value in (filters or {}).items()]

    def _load_options(self, populate: Populate) -> List[Any]:
        if not populate:
            return []
        names = [populate] if isinstance(populate, str) else list(populate)
        return [selectinload(self._column(name)) for name in names]

    def _order_by(self, sort: Mapping[str, int]) -> List[Any]:
        return [
            self._column(field).desc() if direction < 0 else self._column(field).asc()
            for field, direction in sort.items()
        ]

    async def _check_duplicates(
        self,
        checks: DuplicateChecks,
        exclude_id: Optional[str] = None,
    ) -> None:
        """
        Fail on the first (field, value) pair that already exists.

        WHY: A fast path that gives a precise error before the write. The
        unique index remains the real guarantee; concurrent writers can
        still race past this check and are caught by _translate_error.
        """
        for field, value in checks:
            query = select(self.model.id).where(self._column(field) == value)
            if exclude_id is not None:
                query = query.where(self.model.id != exclude_id)
            result = await self.session.execute(query.limit(1))
            if result.scalar_one_or_none() is not None:
                raise DuplicateResourceError(self.resource_name, field, value)

    def _translate_error(
        self,
        error: Exception,
        action: str,
        data: Optional[Mapping[str, Any]] = None,
    ) -> AppException:
        """
        Convert a store failure into an application exception.

        Args:
            error: The exception raised by the driver or a model validator
            action: Attempted action, used in the generic failure message
            data: Values as assigned to the record (after model validators),
                used to report the duplicate value

        Returns:
            The AppException to raise in place of ``error``
        """
        logger.error(
            f"Database {action} failed for {self.resource_name}: {error} [{current_request_id()}]",
            exc_info=error,
        )

        if isinstance(error, IntegrityError):
            duplicate = self._parse_duplicate(error, data or {})
            if duplicate is not None:
                return DuplicateResourceError(self.resource_name, *duplicate)

        if isinstance(error, RecordValidationError):
            return ValidationError(
                errors=[{"field": error.field, "message": error.message, "value": error.value}]
            )

        return DatabaseOperationError(
            message=f"Failed to {action} {self.resource_name.lower()}",
            action=action,
            resource=self.resource_name,
        )

    @staticmethod
    def _parse_duplicate(
        error: IntegrityError,
        data: Mapping[str, Any],
    ) -> Optional[Tuple[str, Any]]:
        message = str(error.orig)
        match = _PG_DUPLICATE_KEY.search(message)
        if match and "already exists" in message:
            return match.group("field"), match.group("value")
        match = _SQLITE_UNIQUE.search(message)
        if match:
            field = match.group("field")
            return field, data.get(field, "unknown")
        if "duplicate key" in message.lower():
            return "field", "unknown"
        return None

    # =========================================================================
    # CRUD operations
    # =========================================================================

    async def create(
        self,
        data: Mapping[str, Any],
        check_duplicates: DuplicateChecks = (),
    ) -> ModelType:
        """
        Create a new record.

        Args:
            data: Field values for the new record
            check_duplicates: (field, value) pairs that must not already exist

        Returns:
            The created model instance with database-generated fields populated

        Raises:
            DuplicateResourceError: If a duplicate check or unique index fails
            ValidationError: If a model validator rejects a value
        """
        written: Mapping[str, Any] = data
        try:
            if check_duplicates:
                await self._check_duplicates(check_duplicates)

            instance = self.model(**data)
            written = {field: getattr(instance, field) for field in data}

            # Savepoint: a failed insert is undone without touching the
            # caller's other work on this session
            async with self.session.begin_nested():
                self.session.add(instance)
                await self.session.flush()

            await self.session.refresh(instance)
            return instance
        except AppException:
            raise
        except Exception as exc:
            raise self._translate_error(exc, "create", written) from exc

    async def find_all(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
        sort: Optional[Mapping[str, int]] = None,
        populate: Populate = None,
    ) -> Tuple[List[ModelType], int]:
        """
        Retrieve one page of records matching ``filters``.

        Args:
            filters: Field name to value equality filters
            page: 1-based page number
            limit: Page size
            sort: Field name to direction (1 ascending, -1 descending)
            populate: Relationship name(s) to load eagerly

        Returns:
            Tuple of (records on the page, total number of matching records)
        """
        try:
            conditions = self._conditions(filters)
            skip = (page - 1) * limit

            query = (
                select(self.model)
                .where(*conditions)
                .order_by(*self._order_by(sort or DEFAULT_SORT))
                .offset(skip)
                .limit(limit)
                .options(*self._load_options(populate))
            )
            result = await self.session.execute(query)
            records = list(result.scalars().all())

            count_query = select(func.count()).select_from(self.model).where(*conditions)
            total = (await self.session.execute(count_query)).scalar_one()

            return records, total
        except AppException:
            raise
        except Exception as exc:
            raise self._translate_error(exc, "find all") from exc

    async def find_by_id(self, id: str, populate: Populate = None) -> ModelType:
        """
        Retrieve a single record by primary key.

        Raises:
            ValidationError: If ``id`` is malformed
            ResourceNotFoundError: If no record has this id
        """
        try:
            id = self.validate_id(id)

            result = await self.session.execute(
                select(self.model)
                .where(self.model.id == id)
                .options(*self._load_options(populate))
            )
            instance = result.scalar_one_or_none()
            if instance is None:
                raise ResourceNotFoundError(self.resource_name, id)
            return instance
        except AppException:
            raise
        except Exception as exc:
            raise self._translate_error(exc, "find by ID") from exc

    async def find_one(
        self,
        filters: Mapping[str, Any],
        populate: Populate = None,
    ) -> Optional[ModelType]:
        """
        Retrieve the first record matching ``filters``.

        Returns:
            The model instance if found, None otherwise (absence is not an error)
        """
        try:
            result = await self.session.execute(
                select(self.model)
                .where(*self._conditions(filters))
                .options(*self._load_options(populate))
                .limit(1)
            )
            return result.scalar_one_or_none()
        except AppException:
            raise
        except Exception as exc:
            raise self._translate_error(exc, "find one") from exc

    async def update(
        self,
        id: str,
        data: Mapping[str, Any],
        check_duplicates: DuplicateChecks = (),
    ) -> ModelType:
        """
        Apply a partial update to an existing record.

        WHY: Values are assigned through the ORM so model validators run on
        updates exactly as they do on inserts.

        Args:
            id: Primary key of the record to update
            data: Fields to update
            check_duplicates: (field, value) pairs that must not exist on
                any other record

        Returns:
            Updated model instance

        Raises:
            ValidationError: If ``id`` is malformed or a value is rejected
            DuplicateResourceError: If another record holds a checked value
            ResourceNotFoundError: If no record has this id
        """
        written: Mapping[str, Any] = data
        try:
            id = self.validate_id(id)

            if check_duplicates:
                await self._check_duplicates(check_duplicates, exclude_id=id)

            instance = await self.session.get(self.model, id)
            if instance is None:
                raise ResourceNotFoundError(self.resource_name, id)

            # Assigned inside the savepoint so a rejected value or a failed
            # flush rolls back only this record
            async with self.session.begin_nested():
                for field, value in data.items():
                    self._column(field)
                    setattr(instance, field, value)
                written = {field: getattr(instance, field) for field in data}
                await self.session.flush()

            await self.session.refresh(instance)
            return instance
        except AppException:
            raise
        except Exception as exc:
            raise self._translate_error(exc, "update", written) from exc

    async def delete(self, id: str) -> ModelType:
        """
        Permanently remove a record.

        Returns:
            The removed model instance

        Raises:
            ValidationError: If ``id`` is malformed
            ResourceNotFoundError: If no record has this id
        """
        try:
            id = self.validate_id(id)

            instance = await self.session.get(self.model, id)
            if instance is None:
                raise ResourceNotFoundError(self.resource_name, id)

            async with self.session.begin_nested():
                await self.session.delete(instance)
                await self.session.flush()
            return instance
        except AppException:
            raise
        except Exception as exc:
            raise self._translate_error(exc, "delete") from exc

    async def soft_delete(self, id: str) -> ModelType:
        """
        Mark a record inactive instead of removing it.

        Returns:
            The updated model instance with ``is_active`` set to False
        """
        try:
            return await self.update(id, {"is_active": False})
        except AppException:
            raise
        except Exception as exc:
            raise self._translate_error(exc, "soft delete") from exc
