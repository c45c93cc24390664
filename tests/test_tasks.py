"""Tests for the low-stock background task."""
from unittest.mock import patch

import pytest
from sqlalchemy.orm import sessionmaker

from pos_ledger.tasks.stock_tasks import check_low_stock, dispatch_low_stock_check


@pytest.fixture
def task_db(db_session):
    TaskSession = sessionmaker(autoflush=False, bind=db_session.get_bind())
    with patch("pos_ledger.tasks.stock_tasks.SessionLocal", TaskSession):
        yield db_session


def test_check_low_stock_reports_products_at_threshold(task_db, make_product):
    plenty = make_product(stock=20, min_stock=5)
    at_threshold = make_product(stock=5, min_stock=5)
    empty = make_product(stock=0, min_stock=2)

    result = check_low_stock([plenty.id, at_threshold.id, empty.id])

    assert result["checked"] == 3
    assert [p["product_id"] for p in result["low_stock"]] == [at_threshold.id, empty.id]
    assert result["low_stock"][0]["status"] == "low_stock"
    assert result["low_stock"][1]["status"] == "out_of_stock"


def test_check_low_stock_ignores_deleted_products(task_db, make_product):
    product = make_product(stock=1, min_stock=5)

    result = check_low_stock([product.id, 9999])

    assert result["checked"] == 1
    assert result["low_stock"][0]["name"] == product.name


def test_dispatch_logs_broker_errors(low_stock_task, caplog):
    low_stock_task.side_effect = ConnectionRefusedError("broker down")

    assert dispatch_low_stock_check([1, 2]) is False
    assert "Could not queue low-stock check" in caplog.text


def test_dispatch_queues_task(low_stock_task):
    assert dispatch_low_stock_check([3]) is True
    low_stock_task.assert_called_once_with([3])
