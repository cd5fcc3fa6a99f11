"""Channel profile and watch history schemas."""

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from src.schemas.common import CamelModel

_ORM_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ChannelProfileResponse(CamelModel):
    """Public channel details with subscription counts for the viewer."""

    model_config = _ORM_CONFIG

    id: int
    username: str
    fullname: str
    email: str
    avatar: str
    cover_image: str = ""
    subscribers_count: int
    subscribed_to_count: int
    is_subscribed: bool


class VideoOwner(CamelModel):
    model_config = _ORM_CONFIG

    fullname: str
    username: str
    avatar: str


class WatchHistoryVideo(CamelModel):
    """A watched video with its owner reduced to public fields."""

    model_config = _ORM_CONFIG

    id: int
    title: str
    description: str | None = None
    thumbnail: str
    video_file: str
    duration: float
    views: int
    owner: VideoOwner
