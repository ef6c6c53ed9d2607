"""Pydantic schemas for migration shim results."""

from pydantic import BaseModel, Field


class MigrationResult(BaseModel):
    """Outcome of one migration shim run, for operator review."""

    success: bool = Field(..., description="Whether the run completed")
    message: str = Field(..., description="One-line summary")
    log: list[str] = Field(default_factory=list, description="Ordered progress lines")
    stats: dict[str, int] = Field(default_factory=dict, description="Row counts by outcome")
    dry_run: bool = Field(default=False, description="True when nothing was written")


class MergeVerification(BaseModel):
    """Post-merge health report."""

    total_personnel: int
    personnel_with_login: int
    roles_without_login: list[str] = Field(
        default_factory=list,
        description="Call signs holding role assignments but no login fields",
    )
    legacy_references: dict[str, int] = Field(
        default_factory=dict,
        description="Rows per table still pointing into the legacy system_users id-space",
    )
    legacy_users_remaining: int = 0

    @property
    def clean(self) -> bool:
        return not self.legacy_users_remaining and not any(self.legacy_references.values())
