import httpx

from storefront._errors import (
    PartialPurchaseFailure,
    PurchaseStep,
    RequestError,
    detail_messages,
    request_error,
)


def _status_error(status: int, **kwargs) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "http://shop.test/cart/7")
    response = httpx.Response(status, request=request, **kwargs)
    return httpx.HTTPStatusError("failed", request=request, response=response)


def test_detail_string() -> None:
    assert detail_messages({"detail": "Insufficient stock"}) == ("Insufficient stock",)


def test_detail_list_of_validation_objects() -> None:
    body = {"detail": [{"msg": "field required"}, {"loc": ["x"]}, {"msg": "too long"}]}
    assert detail_messages(body) == ("field required", "too long")


def test_detail_absent_or_malformed() -> None:
    assert detail_messages(None) == ()
    assert detail_messages({"error": "x"}) == ()
    assert detail_messages(["detail"]) == ()


def test_status_error_uses_first_detail() -> None:
    error = request_error(
        _status_error(422, json={"detail": [{"msg": "bad email"}, {"msg": "bad phone"}]})
    )
    assert error == RequestError("bad email", 422, ("bad email", "bad phone"))


def test_status_error_without_json_body() -> None:
    error = request_error(_status_error(502, text="<html>Bad gateway</html>"))
    assert error.message == "HTTP 502"
    assert error.status == 502


def test_timeout_and_transport_errors() -> None:
    request = httpx.Request("GET", "http://shop.test/")
    assert request_error(httpx.ReadTimeout("slow", request=request)).message == "Request timed out"
    connect = request_error(httpx.ConnectError("refused", request=request))
    assert connect.message.startswith("Connection error")
    assert connect.status is None


def test_unexpected_exception() -> None:
    assert request_error(ValueError("bad payload")).message == "bad payload"


def test_partial_failure_describes_step() -> None:
    failure = PartialPurchaseFailure(
        cause=RequestError("Insufficient stock", 400),
        step=PurchaseStep.ORDER_LINES,
        bill_id=11,
        order_id=12,
        line_ids=(13,),
    )
    assert failure.message == "Insufficient stock"
    assert str(failure) == "Insufficient stock (failed at order_lines)"
