"""Contact schemas."""

from pydantic import AliasChoices, BaseModel, Field


class Contact(BaseModel):
    """A remote correspondent identified by an opaque address."""

    model_config = {"frozen": True, "populate_by_name": True}

    id: str = Field(..., min_length=1, validation_alias=AliasChoices("id", "onion_address"))
    display_name: str = Field(
        default="", validation_alias=AliasChoices("display_name", "nickname")
    )
    last_seen: int | None = Field(None, description="Unix seconds")
