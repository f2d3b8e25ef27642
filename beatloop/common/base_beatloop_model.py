from pydantic import BaseModel, ConfigDict


class BaseBeatloopModel(BaseModel):
    """Shared settings for every Beatloop schema.

    Models are immutable and are validated again whenever they are passed
    into another model.
    """

    model_config = ConfigDict(
        frozen=True,
        revalidate_instances="always",
        validate_assignment=True,
        populate_by_name=True,
    )
