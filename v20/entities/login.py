from v20.core.envelope import RAW, Endpoint, EntitySpec as BaseEntitySpec

_LOGIN = Endpoint(
    "POST", "/v3/login",
    responses={200: {"token": RAW}},
    body_params=("username", "password"),
)

_LOGOUT = Endpoint(
    "POST", "/v3/logout",
    responses={200: {}},
)


class EntitySpec(BaseEntitySpec):

    def login(self, **body):
        """Exchange `username`/`password` for a token. The token is not applied to the context."""
        return self.context.request(_LOGIN, body=body)

    def logout(self):
        return self.context.request(_LOGOUT)
