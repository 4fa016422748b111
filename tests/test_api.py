import pytest
from opentelemetry.trace import SpanKind

from cepweather.config import get_settings

from fakes import CEP_HOST, WEATHER_HOST, status, viacep_found, viacep_not_found, weatherapi_temp


async def test_responses_include_x_request_id(weather_api) -> None:
    resp = await weather_api.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers.get("x-request-id")


async def test_weather_endpoint_returns_three_units(weather_api, upstreams) -> None:
    upstreams.route(CEP_HOST, viacep_found("São Paulo"))
    upstreams.route(WEATHER_HOST, weatherapi_temp(18.0))

    resp = await weather_api.get("/weather", params={"cep": "01001000"})

    assert resp.status_code == 200
    payload = resp.json()
    assert payload["city"] == "São Paulo"
    assert payload["temp_C"] == 18
    assert payload["temp_F"] == pytest.approx(64.4)
    assert payload["temp_K"] == 291
    assert set(payload) == {"city", "temp_C", "temp_F", "temp_K"}


async def test_short_cep_is_unprocessable_without_outbound_calls(weather_api, upstreams) -> None:
    upstreams.route(CEP_HOST, viacep_found("São Paulo"))
    upstreams.route(WEATHER_HOST, weatherapi_temp(18.0))

    resp = await weather_api.get("/weather", params={"cep": "123"})

    assert resp.status_code == 422
    assert resp.json() == {"detail": "invalid zipcode"}
    assert upstreams.calls == []


async def test_missing_cep_is_unprocessable(weather_api, upstreams) -> None:
    resp = await weather_api.get("/weather")
    assert resp.status_code == 422
    assert upstreams.calls == []


async def test_unknown_cep_is_not_found(weather_api, upstreams) -> None:
    upstreams.route(CEP_HOST, viacep_not_found())

    resp = await weather_api.get("/weather", params={"cep": "99999999"})

    assert resp.status_code == 404
    assert resp.json() == {"detail": "can not find zipcode"}
    assert upstreams.calls_to(WEATHER_HOST) == []


async def test_lookup_outage_looks_like_not_found(weather_api, upstreams, span_exporter) -> None:
    upstreams.route(CEP_HOST, status(502))

    resp = await weather_api.get("/weather", params={"cep": "01001000"})

    assert resp.status_code == 404
    assert resp.json() == {"detail": "can not find zipcode"}
    lookup_spans = [s for s in span_exporter.get_finished_spans() if s.name == "viacep.lookup"]
    assert lookup_spans[0].attributes["lookup.outcome"] == "upstream_error"


async def test_weather_outage_is_server_error(weather_api, upstreams) -> None:
    upstreams.route(CEP_HOST, viacep_found("Curitiba"))
    upstreams.route(WEATHER_HOST, status(500))

    resp = await weather_api.get("/weather", params={"cep": "80010000"})

    assert resp.status_code == 500
    assert resp.json() == {"detail": "weather error"}


async def test_weather_endpoint_rejects_post(weather_api, upstreams) -> None:
    resp = await weather_api.post("/weather", params={"cep": "01001000"})
    assert resp.status_code == 405
    assert upstreams.calls == []


async def test_request_span_parents_upstream_spans(weather_api, upstreams, span_exporter) -> None:
    upstreams.route(CEP_HOST, viacep_found("Recife"))
    upstreams.route(WEATHER_HOST, weatherapi_temp(25.0))

    resp = await weather_api.get("/weather", params={"cep": "50010000"})
    assert resp.status_code == 200

    spans = {s.name: s for s in span_exporter.get_finished_spans()}
    server = spans["GET /weather"]
    assert server.attributes["http.status_code"] == 200
    assert spans["viacep.lookup"].parent.span_id == server.context.span_id
    assert spans["weatherapi.current"].parent.span_id == server.context.span_id

    # Trace context travels with the outbound requests.
    for request in upstreams.calls:
        assert "traceparent" in request.headers


async def test_each_outbound_request_gets_a_client_span(weather_api, upstreams, span_exporter) -> None:
    upstreams.route(CEP_HOST, viacep_found("Recife"))
    upstreams.route(WEATHER_HOST, weatherapi_temp(25.0))

    resp = await weather_api.get("/weather", params={"cep": "50010000"})
    assert resp.status_code == 200

    finished = span_exporter.get_finished_spans()
    by_id = {s.context.span_id: s for s in finished}
    client_spans = [s for s in finished if s.kind is SpanKind.CLIENT]
    assert len(client_spans) == 2

    parents = sorted(by_id[s.parent.span_id].name for s in client_spans)
    assert parents == ["viacep.lookup", "weatherapi.current"]
    for span in client_spans:
        assert span.attributes.get("http.method", span.attributes.get("http.request.method")) == "GET"
        assert span.attributes.get("http.status_code", span.attributes.get("http.response.status_code")) == 200


async def test_misconfigured_lookup_url_is_not_found(weather_api, upstreams, monkeypatch) -> None:
    monkeypatch.setenv("CEP_API_URL", "http://viacep:notaport/ws")
    get_settings.cache_clear()
    upstreams.route(WEATHER_HOST, weatherapi_temp(25.0))

    resp = await weather_api.get("/weather", params={"cep": "01001000"})

    assert resp.status_code == 404
    assert resp.json() == {"detail": "can not find zipcode"}
    assert upstreams.calls == []


async def test_misconfigured_weather_url_is_weather_error(weather_api, upstreams, monkeypatch) -> None:
    monkeypatch.setenv("WEATHER_API_URL", "http://weatherapi:notaport/v1")
    get_settings.cache_clear()
    upstreams.route(CEP_HOST, viacep_found("Recife"))

    resp = await weather_api.get("/weather", params={"cep": "50010000"})

    assert resp.status_code == 500
    assert resp.json() == {"detail": "weather error"}
