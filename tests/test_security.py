from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from gistblog.security import TOKEN_HEADER_NAME, get_gist_token


def test_get_gist_token_prefers_dedicated_header():
    assert get_gist_token(header_token=" abc ", authorization="token other") == "abc"


def test_get_gist_token_accepts_authorization_schemes():
    assert get_gist_token(header_token=None, authorization="token abc") == "abc"
    assert get_gist_token(header_token=None, authorization="Bearer xyz") == "xyz"


def test_get_gist_token_ignores_unknown_scheme_and_blank():
    assert get_gist_token(header_token=None, authorization="Basic dXNlcg==") is None
    assert get_gist_token(header_token="   ", authorization=None) is None
    assert get_gist_token(header_token=None, authorization="token ") is None


def make_app():
    app = FastAPI()

    @app.get("/whoami")
    def whoami(token=Depends(get_gist_token)):
        return {"token": token}

    return TestClient(app)


def test_dependency_reads_header_in_route():
    client = make_app()

    res = client.get("/whoami", headers={TOKEN_HEADER_NAME: "secret"})

    assert res.json() == {"token": "secret"}


def test_dependency_reads_authorization_in_route():
    client = make_app()

    res = client.get("/whoami", headers={"Authorization": "token secret"})

    assert res.json() == {"token": "secret"}


def test_dependency_allows_anonymous_requests():
    res = make_app().get("/whoami")

    assert res.status_code == 200
    assert res.json() == {"token": None}
