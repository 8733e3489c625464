from pydantic import BaseModel, ConfigDict


class Aggregate(BaseModel):
    """Base for ledger entities owned by exactly one service."""

    model_config = ConfigDict(validate_assignment=True)
