"""
Campaign Draft Repository

Data access layer - PostgreSQL (Async)
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, List, Mapping, Optional

import asyncpg

from core.config import DraftStoreConfig, get_settings

from .models import CampaignDraft, DraftStatus, WizardSnapshot
from .protocols import DraftNotFoundError

logger = logging.getLogger(__name__)


class ExtendedJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal and datetime types"""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


def json_dumps(obj):
    """JSON dumps with Decimal and datetime support"""
    return json.dumps(obj, cls=ExtendedJSONEncoder)


def new_draft_id() -> str:
    return f"drf_{uuid.uuid4().hex[:16]}"


class DraftRepository:
    """Campaign draft repository - PostgreSQL (Async)"""

    def __init__(
        self,
        config: Optional[DraftStoreConfig] = None,
        pool: Optional[asyncpg.Pool] = None,
    ):
        self.config = config or get_settings().wizard.draft_store
        self.schema = self.config.schema
        self.drafts_table = "campaign_drafts"
        self._pool = pool

    @property
    def table(self) -> str:
        return f"{self.schema}.{self.drafts_table}"

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("DraftRepository not initialized")
        return self._pool

    async def initialize(self):
        """Initialize database connection pool"""
        if self._pool is not None:
            return
        logger.info(
            f"Connecting to PostgreSQL at {self.config.postgres_host}:{self.config.postgres_port}"
        )
        self._pool = await asyncpg.create_pool(
            host=self.config.postgres_host,
            port=self.config.postgres_port,
            user=self.config.postgres_user,
            password=self.config.postgres_password,
            database=self.config.postgres_db,
            min_size=self.config.pool_min_size,
            max_size=self.config.pool_max_size,
        )
        logger.info("Draft repository initialized with PostgreSQL")

    async def close(self):
        """Close database connection pool"""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
        logger.info("Draft repository database connection closed")

    async def health_check(self) -> bool:
        """Check repository health"""
        try:
            result = await self.pool.fetchval("SELECT 1")
            return result == 1
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return False

    # ====================
    # Draft Store
    # ====================

    async def upsert(
        self,
        draft_id: Optional[str],
        snapshot: WizardSnapshot,
        owner_id: str,
    ) -> str:
        """Create a draft when draft_id is None, otherwise update it"""
        now = datetime.now(timezone.utc)
        data = json_dumps(snapshot.to_payload())
        try:
            if draft_id is None:
                query = f'''
                    INSERT INTO {self.table} (
                        draft_id, owner_id, status, data, created_at, updated_at
                    ) VALUES ($1, $2, $3, $4::jsonb, $5, $5)
                    RETURNING draft_id
                '''
                draft_id = await self.pool.fetchval(
                    query, new_draft_id(), owner_id, DraftStatus.DRAFT.value, data, now
                )
                logger.debug(f"Created draft {draft_id} for owner {owner_id}")
                return draft_id

            query = f'''
                UPDATE {self.table}
                SET data = $3::jsonb, updated_at = $4
                WHERE draft_id = $1 AND owner_id = $2 AND status = '{DraftStatus.DRAFT.value}'
                RETURNING draft_id
            '''
            updated_id = await self.pool.fetchval(query, draft_id, owner_id, data, now)
        except Exception as e:
            logger.error(f"Error saving draft {draft_id}: {e}", exc_info=True)
            raise

        if updated_id is None:
            raise DraftNotFoundError(f"Draft not found: {draft_id}")
        return updated_id

    async def fetch_by_id(self, draft_id: str) -> Optional[CampaignDraft]:
        """Get draft by ID"""
        try:
            query = f'''
                SELECT * FROM {self.table}
                WHERE draft_id = $1
            '''
            row = await self.pool.fetchrow(query, draft_id)
            return self._row_to_draft(row) if row else None
        except Exception as e:
            logger.error(f"Error getting draft {draft_id}: {e}")
            raise

    async def list_by_owner(
        self,
        owner_id: str,
        limit: int = 20,
        offset: int = 0,
    ) -> List[CampaignDraft]:
        """Open drafts of an owner, most recently updated first"""
        try:
            query = f'''
                SELECT * FROM {self.table}
                WHERE owner_id = $1 AND status = $2
                ORDER BY updated_at DESC
                LIMIT $3 OFFSET $4
            '''
            rows = await self.pool.fetch(query, owner_id, DraftStatus.DRAFT.value, limit, offset)
            return [self._row_to_draft(row) for row in rows]
        except Exception as e:
            logger.error(f"Error listing drafts for owner {owner_id}: {e}")
            raise

    async def delete(self, draft_id: str, owner_id: str) -> bool:
        """Delete an open draft; finalized drafts are kept"""
        try:
            query = f'''
                DELETE FROM {self.table}
                WHERE draft_id = $1 AND owner_id = $2 AND status = $3
            '''
            result = await self.pool.execute(query, draft_id, owner_id, DraftStatus.DRAFT.value)
            return result.endswith(" 1")
        except Exception as e:
            logger.error(f"Error deleting draft {draft_id}: {e}")
            raise

    async def mark_finalized(self, draft_id: str, campaign_id: str) -> CampaignDraft:
        """Close a draft once its live campaign exists"""
        try:
            query = f'''
                UPDATE {self.table}
                SET status = $2, campaign_id = $3, updated_at = $4
                WHERE draft_id = $1 AND status = $5
                RETURNING *
            '''
            row = await self.pool.fetchrow(
                query,
                draft_id,
                DraftStatus.FINALIZED.value,
                campaign_id,
                datetime.now(timezone.utc),
                DraftStatus.DRAFT.value,
            )
        except Exception as e:
            logger.error(f"Error finalizing draft {draft_id}: {e}")
            raise

        if row is None:
            raise DraftNotFoundError(f"Draft not found: {draft_id}")
        logger.info(f"Draft {draft_id} finalized as campaign {campaign_id}")
        return self._row_to_draft(row)

    # ====================
    # Helpers
    # ====================

    def _row_to_draft(self, row: Mapping[str, Any]) -> CampaignDraft:
        data = row.get("data")
        if isinstance(data, str):
            data = json.loads(data)
        return CampaignDraft(
            draft_id=row.get("draft_id"),
            owner_id=row.get("owner_id"),
            status=DraftStatus(row.get("status") or DraftStatus.DRAFT.value),
            data=WizardSnapshot.from_payload(data),
            campaign_id=row.get("campaign_id"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


__all__ = ["DraftRepository", "new_draft_id"]
