import json
import uuid
from concurrent.futures import ThreadPoolExecutor

import pytest

from receipt_processor import create_app

valid_receipts = {
    json.dumps({
        "retailer": "Target",
        "purchaseDate": "2022-01-01",
        "purchaseTime": "13:01",
        "items": [
            {
                "shortDescription": "Mountain Dew 12PK",
                "price": "6.49"
            }, {
                "shortDescription": "Emils Cheese Pizza",
                "price": "12.25"
            }, {
                "shortDescription": "Knorr Creamy Chicken",
                "price": "1.26"
            }, {
                "shortDescription": "Doritos Nacho Cheese",
                "price": "3.35"
            }, {
                "shortDescription": "   Klarbrunn 12-PK 12 FL OZ  ",
                "price": "12.00"
            }
        ],
        "total": "35.35"
    }): 28,
    json.dumps({
        "retailer": "M&M Corner Market",
        "purchaseDate": "2022-03-20",
        "purchaseTime": "14:33",
        "items": [
            {
                "shortDescription": "Gatorade",
                "price": "2.25"
            }, {
                "shortDescription": "Gatorade",
                "price": "2.25"
            }, {
                "shortDescription": "Gatorade",
                "price": "2.25"
            }, {
                "shortDescription": "Gatorade",
                "price": "2.25"
            }
        ],
        "total": "9.00"
    }): 109,
    json.dumps({
        "retailer": "Walgreens",
        "purchaseDate": "2022-01-02",
        "purchaseTime": "08:13",
        "total": "2.65",
        "items": [
            {"shortDescription": "Pepsi - 12-oz", "price": "1.25"},
            {"shortDescription": "Dasani", "price": "1.40"}
        ]
    }): 15,
    json.dumps({
        "retailer": "Target",
        "purchaseDate": "2022-01-02",
        "purchaseTime": "13:13",
        "total": "1.25",
        "items": [
            {"shortDescription": "Pepsi - 12-oz", "price": "1.25"}
        ]
    }): 31
}


def post_receipt(client, receipt):
    return client.post('/receipts/process', content_type='application/json', data=json.dumps(receipt))


def test_process_valid_receipts(client):
    for test_json, expected_points in valid_receipts.items():
        process_response = client.post('/receipts/process', content_type='application/json', data=test_json)
        assert process_response.status_code == 200
        receipt_id = json.loads(process_response.data)["id"]
        uuid.UUID(receipt_id)
        get_response = client.get(f'/receipts/{receipt_id}/points')
        assert get_response.status_code == 200
        assert json.loads(get_response.data) == {"points": expected_points}


def test_process_receipts_unique_ids(client, simple_receipt_skeleton):
    receipt_ids = []
    for i in range(10):
        process_response = post_receipt(client, simple_receipt_skeleton)
        receipt_ids.append(json.loads(process_response.data)["id"])
    assert len(set(receipt_ids)) == len(receipt_ids)


def test_process_receipts_duplicate_detection():
    client = create_app({"TESTING": True, "DUPLICATE_DETECTION": True}).test_client()
    receipt = json.loads(list(valid_receipts)[0])
    first_id = json.loads(post_receipt(client, receipt).data)["id"]
    second_id = json.loads(post_receipt(client, receipt).data)["id"]
    assert first_id == second_id

    receipt["purchaseTime"] = "13:02"
    third_id = json.loads(post_receipt(client, receipt).data)["id"]
    assert third_id != first_id


def test_process_receipts_invalid_retailer_name(client, simple_receipt_skeleton):
    cases = {
        "   ": "must not be blank",
        "": "must not be blank",
        "Target!": "must only contain letters, digits, spaces, hyphens and '&'",
    }
    for name, message in cases.items():
        simple_receipt_skeleton["retailer"] = name
        process_response = post_receipt(client, simple_receipt_skeleton)
        assert process_response.status_code == 400
        assert json.loads(process_response.data) == {"error": "Invalid receipt", "errors": {"retailer": message}}


def test_process_receipts_invalid_purchase_date(client, simple_receipt_skeleton):
    invalid_dates = ["test", "0000-01-01", "2023-15-15", "2023-10-99", "2022-1-1", "", "9999-99-99", "2022-01-02\n"]
    for date in invalid_dates:
        simple_receipt_skeleton["purchaseDate"] = date
        process_response = post_receipt(client, simple_receipt_skeleton)
        assert process_response.status_code == 400
        assert list(json.loads(process_response.data)["errors"]) == ["purchaseDate"]


def test_process_receipts_invalid_purchase_time(client, simple_receipt_skeleton):
    invalid_times = ["test", "13:99", "99:13", "99:99", "", "13-13", "1:13", "13:13\n"]
    for time in invalid_times:
        simple_receipt_skeleton["purchaseTime"] = time
        process_response = post_receipt(client, simple_receipt_skeleton)
        assert process_response.status_code == 400
        assert list(json.loads(process_response.data)["errors"]) == ["purchaseTime"]


def test_process_receipts_invalid_total(client, simple_receipt_skeleton):
    invalid_totals = ["test", "0", "333", "", "5.310", ".22", "-1.00", "1.25\n", " 1.25"]
    for total in invalid_totals:
        simple_receipt_skeleton["total"] = total
        process_response = post_receipt(client, simple_receipt_skeleton)
        assert process_response.status_code == 400
        assert json.loads(process_response.data)["errors"] == {"total": "must be in 'xx.xx' format"}


def test_process_receipts_invalid_attribute_types(client, simple_receipt_skeleton):
    for attribute in ["retailer", "purchaseDate", "purchaseTime", "total"]:
        original = simple_receipt_skeleton[attribute]
        for elem in [[], 25, 3.88, {}]:
            simple_receipt_skeleton[attribute] = elem
            process_response = post_receipt(client, simple_receipt_skeleton)
            assert process_response.status_code == 400
            assert json.loads(process_response.data)["errors"] == {attribute: "must be a string"}
        simple_receipt_skeleton[attribute] = original


def test_process_receipts_missing_attribute(client, simple_receipt_skeleton):
    del simple_receipt_skeleton["total"]
    process_response = post_receipt(client, simple_receipt_skeleton)
    assert process_response.status_code == 400
    assert json.loads(process_response.data)["errors"] == {"total": "is required"}


def test_process_receipts_invalid_items(client, simple_receipt_skeleton):
    cases = [
        ([], "at least one item is required"),
        (None, "is required"),
        ({}, "must be a list"),
        ("", "must be a list"),
    ]
    for items, message in cases:
        simple_receipt_skeleton["items"] = items
        process_response = post_receipt(client, simple_receipt_skeleton)
        assert process_response.status_code == 400
        assert json.loads(process_response.data)["errors"] == {"items": message}


def test_process_receipts_invalid_item_fields(client, simple_receipt_skeleton):
    simple_receipt_skeleton["items"] = [
        {"shortDescription": "Pepsi - 12-oz", "price": "1.25"},
        "Dasani",
        {"shortDescription": "???", "price": "1.4"},
        {"price": 2},
    ]
    process_response = post_receipt(client, simple_receipt_skeleton)
    assert process_response.status_code == 400
    assert json.loads(process_response.data)["errors"] == {
        "items[1]": "must be an object",
        "items[2].shortDescription": "must only contain letters, digits, spaces and hyphens",
        "items[2].price": "must be in 'xx.xx' format",
        "items[3].shortDescription": "is required",
        "items[3].price": "must be a string",
    }


def test_process_receipts_reports_every_invalid_field(client, simple_receipt_skeleton):
    simple_receipt_skeleton["retailer"] = " "
    simple_receipt_skeleton["total"] = "1"
    process_response = post_receipt(client, simple_receipt_skeleton)
    assert process_response.status_code == 400
    assert set(json.loads(process_response.data)["errors"]) == {"retailer", "total"}


def test_process_receipts_body_not_json_object(client):
    for body in ["[]", "\"receipt\"", "not json"]:
        process_response = client.post('/receipts/process', content_type='application/json', data=body)
        assert process_response.status_code == 400
        assert json.loads(process_response.data)["errors"] == {"receipt": "must be a JSON object"}


def test_process_receipts_long_total(client, simple_receipt_skeleton):
    simple_receipt_skeleton["total"] = "9" * 28 + ".00"
    process_response = post_receipt(client, simple_receipt_skeleton)
    assert process_response.status_code == 200
    receipt_id = json.loads(process_response.data)["id"]
    # 6 retailer + 50 round dollar + 25 quarter multiple
    assert json.loads(client.get(f'/receipts/{receipt_id}/points').data) == {"points": 81}


def test_get_points_nonexistent_id(client):
    res = client.get('/receipts/test/points')
    assert res.status_code == 404
    assert json.loads(res.data) == {"error": "Receipt with ID 'test' not found"}


def test_unknown_route_and_wrong_method(client):
    assert client.get('/receipts').status_code == 404
    assert client.get('/receipts/process').status_code == 405


def test_unexpected_error_returns_500():
    class BrokenStore:
        def save(self, receipt_id, record, dedup_key=None):
            raise RuntimeError("disk on fire")

        def get(self, receipt_id):
            raise RuntimeError("disk on fire")

    client = create_app({"TESTING": True}, store=BrokenStore()).test_client()
    res = client.get('/receipts/abc/points')
    assert res.status_code == 500
    assert json.loads(res.data) == {"error": "Internal server error"}

    res = post_receipt(client, json.loads(list(valid_receipts)[3]))
    assert res.status_code == 500
    assert b"disk on fire" not in res.data


def test_get_points_idempotency(client, simple_receipt_skeleton):
    receipt_id = json.loads(post_receipt(client, simple_receipt_skeleton).data)["id"]
    for i in range(5):
        get_response = client.get(f'/receipts/{receipt_id}/points')
        assert get_response.status_code == 200
        assert json.loads(get_response.data)["points"] == 31


def test_process_receipts_concurrency(app, simple_receipt_skeleton):
    params = [simple_receipt_skeleton] * 500

    def test_post(json_param):
        # each thread gets its own client so cookies and contexts are not shared
        return json.loads(app.test_client().post('/receipts/process', json=json_param).data)["id"]

    with ThreadPoolExecutor(max_workers=50) as pool:
        receipt_ids = list(pool.map(test_post, params))

    assert len(set(receipt_ids)) == len(params)
    assert len(app.extensions["receipt_service"]._store) == len(params)


def test_get_points_concurrency(app, client, simple_receipt_skeleton):
    receipt_id = json.loads(post_receipt(client, simple_receipt_skeleton).data)["id"]
    params = [receipt_id] * 500

    def test_get(id_param):
        return json.loads(app.test_client().get(f'/receipts/{id_param}/points').data)["points"]

    with ThreadPoolExecutor(max_workers=50) as pool:
        assert set(pool.map(test_get, params)) == {31}


def test_unknown_log_level_is_rejected():
    with pytest.raises(ValueError):
        create_app({"TESTING": True, "LOG_LEVEL": "LOUD"})
