import datetime

import jwt

from wordrun.utils.decorators import bearer_token

from conftest import register


def test_register_normalizes_username(services):
    user_id = register(services, "  Alice ")

    user = services.stores.users.get(user_id)
    assert user.username == "alice"
    assert user.password_hash != "secret123"


def test_register_validation_messages(services):
    assert services.auth.register_user("", "secret123")['error'] == "Username and password are required"
    assert services.auth.register_user("al", "secret123")['error'] == "Username must be at least 3 characters long"
    assert services.auth.register_user("alice", "123")['error'] == "Password must be at least 6 characters long"

    register(services, "alice")
    assert services.auth.register_user("ALICE", "secret123")['error'] == "Username already exists"


def test_login_issues_verifiable_token(services):
    user_id = register(services, "alice")

    result = services.auth.login_user("Alice", "secret123")

    assert result['success'] is True
    verified = services.auth.verify_token(result['token'])
    assert verified['user']['id'] == user_id
    assert services.stores.users.get(user_id).last_login is not None


def test_login_rejects_wrong_password(services):
    register(services, "alice")

    assert services.auth.login_user("alice", "nope-nope") == {
        'success': False, 'error': 'Invalid username or password'
    }
    assert services.auth.login_user("ghost", "secret123")['error'] == 'Invalid username or password'


def test_verify_token_failures(services):
    user_id = register(services, "alice")
    expired = jwt.encode(
        {'user_id': user_id, 'exp': datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(minutes=1)},
        services.auth.jwt_secret, algorithm="HS256",
    )
    no_user = jwt.encode({'user_id': 'missing'}, services.auth.jwt_secret, algorithm="HS256")

    assert services.auth.verify_token("")['error'] == "Token is required"
    assert services.auth.verify_token("garbage")['error'] == "Invalid token"
    assert services.auth.verify_token(expired)['error'] == "Token has expired"
    assert services.auth.verify_token(no_user)['error'] == "User not found"


def test_bearer_token_parsing():
    assert bearer_token("Bearer abc.def") == "abc.def"
    assert bearer_token("bearer  abc ") == "abc"
    assert bearer_token("Basic abc") is None
    assert bearer_token("Bearer") is None
    assert bearer_token(None) is None
