from app.schemas.common.camel_model import CamelModel
from app.schemas.users.user_base import UserOut, UserStats


class ProfileOut(CamelModel):
    user: UserOut


class ProfileUpdateOut(CamelModel):
    message: str
    user: UserOut


class ProfilePictureOut(CamelModel):
    message: str
    profile_picture: str
    user: UserOut


class StatsOut(CamelModel):
    stats: UserStats
