from ..schemas.auth import LoginResponse
from ..schemas.users import User
from .api_client import ApiClient


def login(client: ApiClient, email: str, password: str) -> User:
    """Exchange credentials for a bearer token and keep it in the credential slot."""
    response = LoginResponse.model_validate(client.post("/login", {"email": email, "password": password}))
    client.credentials.set_token(response.token)
    return response.user


def get_current_user(client: ApiClient) -> User:
    return User.model_validate(client.get("/me"))


def logout(client: ApiClient) -> None:
    try:
        client.post("/logout", {})
    finally:
        client.credentials.clear_token()
