"""Data models for ipa-meta."""

from pydantic import BaseModel, ConfigDict, Field


class IpaMeta(BaseModel):
    """Identifying metadata of an iOS application archive."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "bundle_id": "com.example.app",
                "version": "1.2.3",
                "display_name": "Example",
            }
        },
    )

    bundle_id: str = Field(default="", description="CFBundleIdentifier, empty if absent")
    version: str = Field(
        default="",
        description="CFBundleShortVersionString, falling back to CFBundleVersion",
    )
    display_name: str = Field(
        default="",
        description="Best-effort human-readable name; empty if nothing usable was found",
    )
