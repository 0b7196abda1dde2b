"""
CLI bootstrap tests: system init, user/token management and catalog commands.
"""

import json

from conftest import auth_headers
from doctorplanet.models import Product, User, ApiToken
from doctorplanet.extensions import db


def test_system_init_creates_admin_and_token(app, client, db_session):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["system", "init", "--admin-email", "owner@doctorplanet.test"])
    assert result.exit_code == 0, result.output
    assert "PASS Created admin" in result.output

    token = result.output.strip().splitlines()[-1].split(": ", 1)[1]
    resp = client.get("/api/admin/dashboard", headers=auth_headers(token))
    assert resp.status_code == 200

    # Second run is a no-op
    result = runner.invoke(args=["system", "init", "--admin-email", "owner@doctorplanet.test"])
    assert "already exists" in result.output
    assert db_session.query(User).count() == 1


def test_users_create_and_issue_token(app, db_session):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["users", "create", "--email", "Ali@DoctorPlanet.test", "--role", "SALESMAN"])
    assert result.exit_code == 0, result.output

    user = db_session.query(User).filter_by(email="ali@doctorplanet.test").one()
    assert user.role == "SALESMAN"

    result = runner.invoke(args=["users", "issue-token", "--email", "ali@doctorplanet.test"])
    assert len(result.output.strip()) == 64

    result = runner.invoke(args=["users", "revoke-tokens", "--email", "ali@doctorplanet.test"])
    assert "Revoked 1 token(s)" in result.output
    assert db_session.query(ApiToken).filter_by(is_revoked=False).count() == 0


def test_users_create_duplicate(app, db_session):
    runner = app.test_cli_runner()
    runner.invoke(args=["users", "create", "--email", "a@b.test", "--role", "USER"])
    result = runner.invoke(args=["users", "create", "--email", "a@b.test", "--role", "USER"])
    assert "FAIL" in result.output


def test_catalog_add_product_with_matrix(app, db_session):
    runner = app.test_cli_runner()
    result = runner.invoke(args=[
        "catalog", "add-product",
        "--sku", "SCR-009",
        "--name", "Scrub Suit",
        "--price-cents", "350000",
        "--color-size-stock", json.dumps({"Navy": {"M": 5, "L": 3}}),
    ])
    assert result.exit_code == 0, result.output

    product = db_session.query(Product).filter_by(sku="SCR-009").one()
    assert product.stock == 8

    result = runner.invoke(args=["catalog", "low-stock"])
    assert "SCR-009" in result.output


def test_catalog_add_product_bad_json(app, db_session):
    runner = app.test_cli_runner()
    result = runner.invoke(args=[
        "catalog", "add-product", "--sku", "X", "--name", "X", "--price-cents", "1",
        "--color-size-stock", "{not json",
    ])
    assert "FAIL" in result.output
    assert db.session.query(Product).count() == 0
