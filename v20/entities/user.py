from v20.core.envelope import Endpoint, EntitySpec as BaseEntitySpec, one
from v20.core.models import Definition, Property


class UserInfo(Definition):
    _properties = (
        Property("username", "username", "string"),
        Property("userID", "userID", "integer"),
        Property("country", "country", "string"),
        Property("emailAddress", "emailAddress", "string"),
    )


class UserInfoExternal(Definition):
    _properties = (
        Property("userID", "userID", "integer"),
        Property("country", "country", "string"),
        Property("FIFO", "FIFO", "boolean"),
    )


_GET = Endpoint(
    "GET", "/v3/users/{userSpecifier}",
    responses={200: {"userInfo": one("user.UserInfo")}},
)

_GET_EXTERNAL = Endpoint(
    "GET", "/v3/users/{userSpecifier}/externalInfo",
    responses={200: {"userInfo": one("user.UserInfoExternal")}},
)


class EntitySpec(BaseEntitySpec):

    def get(self, user_specifier):
        """`user_specifier` is a user ID or `@` for the token's own user."""
        return self.context.request(_GET, {"userSpecifier": user_specifier})

    def get_external(self, user_specifier):
        return self.context.request(_GET_EXTERNAL, {"userSpecifier": user_specifier})
