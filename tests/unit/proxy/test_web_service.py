from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any

import pytest
import requests

from rstools.exceptions import ProxyCreationError, ReportServerError
from rstools.models import ConnectionSettings, Credentials, Property
from rstools.proxy import web_service
from rstools.proxy.web_service import (
    RS_NAMESPACE,
    SOAP_NAMESPACE,
    WebServiceProxy,
    build_create_linked_item_envelope,
    build_endpoint_url,
    new_web_service_proxy,
    parse_soap_fault,
)

NS = {"soap": SOAP_NAMESPACE, "rs": RS_NAMESPACE}

FAULT_RESPONSE = f"""<?xml version="1.0" encoding="utf-8"?>
<soap:Envelope xmlns:soap="{SOAP_NAMESPACE}">
  <soap:Body>
    <soap:Fault>
      <faultcode>soap:Client</faultcode>
      <faultstring>The item '/Regional/Sales' already exists.</faultstring>
    </soap:Fault>
  </soap:Body>
</soap:Envelope>""".encode()

OK_RESPONSE = f"""<?xml version="1.0" encoding="utf-8"?>
<soap:Envelope xmlns:soap="{SOAP_NAMESPACE}">
  <soap:Body><CreateLinkedItemResponse xmlns="{RS_NAMESPACE}" /></soap:Body>
</soap:Envelope>""".encode()


# -------- Fakes --------


class FakeResponse:
    def __init__(
        self, status_code: int = 200, content: bytes = OK_RESPONSE, reason: str = "OK"
    ) -> None:
        self.status_code = status_code
        self.content = content
        self.reason = reason

    @property
    def ok(self) -> bool:
        return self.status_code < 400


class FakeSession(requests.Session):
    """Session that records posts and returns a canned response."""

    def __init__(
        self, response: FakeResponse | None = None, error: Exception | None = None
    ) -> None:
        super().__init__()
        self.response = response or FakeResponse()
        self.error = error
        self.posts: list[dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> FakeResponse:  # type: ignore[override]
        self.posts.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


# -------- helpers --------


class TestBuildEndpointUrl:
    @pytest.mark.parametrize(
        "uri",
        [
            "http://localhost/reportserver",
            "http://localhost/reportserver/",
            "  http://localhost/reportserver/  ",
        ],
    )
    def test_appends_endpoint(self, uri: str) -> None:
        assert (
            build_endpoint_url(uri)
            == "http://localhost/reportserver/ReportService2010.asmx"
        )

    def test_keeps_explicit_endpoint(self) -> None:
        uri = "https://rs.example.com/ReportServer/ReportService2010.asmx"
        assert build_endpoint_url(uri) == uri


class TestEnvelope:
    def test_create_linked_item_envelope(self) -> None:
        envelope = build_create_linked_item_envelope(
            "Sales EMEA",
            "/Regional",
            "/Finance/Sales",
            [Property(name="Hidden", value="true")],
        )
        root = ET.fromstring(envelope)
        request = root.find("soap:Body/rs:CreateLinkedItem", NS)

        assert request is not None
        assert request.findtext("rs:ItemPath", namespaces=NS) == "Sales EMEA"
        assert request.findtext("rs:Parent", namespaces=NS) == "/Regional"
        assert request.findtext("rs:Link", namespaces=NS) == "/Finance/Sales"
        props = request.findall("rs:Properties/rs:Property", NS)
        assert len(props) == 1
        assert props[0].findtext("rs:Name", namespaces=NS) == "Hidden"
        assert props[0].findtext("rs:Value", namespaces=NS) == "true"

    def test_no_properties_element_when_empty(self) -> None:
        root = ET.fromstring(build_create_linked_item_envelope("a", "/b", "/c", []))
        assert root.find(".//rs:Properties", NS) is None

    def test_special_characters_are_escaped(self) -> None:
        envelope = build_create_linked_item_envelope(
            "R&D <draft>", "/b", "/c", []
        )
        root = ET.fromstring(envelope)
        assert root.findtext(".//rs:ItemPath", namespaces=NS) == "R&D <draft>"


class TestParseSoapFault:
    def test_fault_is_extracted(self) -> None:
        assert parse_soap_fault(FAULT_RESPONSE) == (
            "soap:Client",
            "The item '/Regional/Sales' already exists.",
        )

    def test_success_response_is_not_a_fault(self) -> None:
        assert parse_soap_fault(OK_RESPONSE) is None

    def test_non_xml_is_not_a_fault(self) -> None:
        assert parse_soap_fault(b"<html>Service Unavailable") is None


# -------- WebServiceProxy --------


class TestWebServiceProxy:
    def _proxy(self, session: FakeSession, **kwargs: Any) -> WebServiceProxy:
        return WebServiceProxy(
            "http://rs/reportserver/ReportService2010.asmx", session=session, **kwargs
        )

    def test_create_linked_item_posts_soap_request(self) -> None:
        session = FakeSession()
        proxy = self._proxy(session, timeout_s=5)

        proxy.create_linked_item("Sales", "/Regional", "/Finance/Sales", [])

        assert len(session.posts) == 1
        post = session.posts[0]
        assert post["url"] == "http://rs/reportserver/ReportService2010.asmx"
        assert post["timeout"] == 5
        assert post["headers"]["SOAPAction"] == f'"{RS_NAMESPACE}/CreateLinkedItem"'
        assert post["headers"]["Content-Type"].startswith("text/xml")
        assert b"CreateLinkedItem" in post["data"]

    def test_soap_fault_raises_report_server_error(self) -> None:
        session = FakeSession(FakeResponse(500, FAULT_RESPONSE, "Internal"))
        proxy = self._proxy(session)

        with pytest.raises(ReportServerError) as exc_info:
            proxy.create_linked_item("Sales", "/Regional", "/Finance/Sales", [])

        assert exc_info.value.message == "The item '/Regional/Sales' already exists."
        assert exc_info.value.context["status_code"] == 500
        assert exc_info.value.context["fault_code"] == "soap:Client"

    def test_http_error_without_fault(self) -> None:
        session = FakeSession(FakeResponse(401, b"", "Unauthorized"))
        proxy = self._proxy(session)

        with pytest.raises(ReportServerError, match="HTTP 401"):
            proxy.create_linked_item("a", "/b", "/c", [])

    def test_transport_error_is_wrapped(self) -> None:
        original = requests.ConnectionError("connection refused")
        proxy = self._proxy(FakeSession(error=original))

        with pytest.raises(ReportServerError, match="Could not reach") as exc_info:
            proxy.create_linked_item("a", "/b", "/c", [])

        assert exc_info.value.__cause__ is original

    def test_credentials_set_basic_auth(self) -> None:
        session = FakeSession()
        creds = Credentials(username="svc", password="pw", domain="CORP")
        self._proxy(session, credentials=creds)

        assert isinstance(session.auth, requests.auth.HTTPBasicAuth)
        assert session.auth.username == "CORP\\svc"
        assert session.auth.password == "pw"

    def test_verify_ssl_applied(self) -> None:
        session = FakeSession()
        self._proxy(session, verify_ssl=False)
        assert session.verify is False

    def test_context_manager_closes_session(self) -> None:
        closed: list[bool] = []
        session = FakeSession()
        session.close = lambda: closed.append(True)  # type: ignore[method-assign]

        with self._proxy(session):
            pass

        assert closed == [True]


# -------- new_web_service_proxy --------


class TestNewWebServiceProxy:
    def test_uses_given_settings(self) -> None:
        settings = ConnectionSettings(
            report_server_uri="https://rs.example.com/ReportServer",
            timeout_s=10,
            verify_ssl=False,
        )
        proxy = new_web_service_proxy(settings=settings)

        assert (
            proxy.endpoint_url
            == "https://rs.example.com/ReportServer/ReportService2010.asmx"
        )
        assert proxy.timeout_s == 10

    def test_explicit_uri_overrides_settings(self) -> None:
        settings = ConnectionSettings(report_server_uri="http://old/reportserver")
        proxy = new_web_service_proxy("http://new/reportserver", settings=settings)
        assert proxy.endpoint_url == "http://new/reportserver/ReportService2010.asmx"

    def test_loads_settings_when_none_given(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        seen: dict[str, Any] = {}

        def fake_load_settings(**kwargs: Any) -> ConnectionSettings:
            seen.update(kwargs)
            return ConnectionSettings(report_server_uri="http://cfg/reportserver")

        monkeypatch.setattr(web_service, "load_settings", fake_load_settings)

        proxy = new_web_service_proxy()

        assert seen == {
            "config_file": None,
            "report_server_uri": None,
            "credentials": None,
        }
        assert proxy.endpoint_url == "http://cfg/reportserver/ReportService2010.asmx"

    def test_reads_given_config_file(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.delenv("RSTOOLS_REPORT_SERVER_URI", raising=False)
        monkeypatch.delenv("RSTOOLS_USERNAME", raising=False)
        cfg = tmp_path / "rs.yaml"
        cfg.write_text("report_server_uri: http://cfg/reportserver\ntimeout_s: 7\n")

        with new_web_service_proxy(config_file=cfg) as proxy:
            assert (
                proxy.endpoint_url == "http://cfg/reportserver/ReportService2010.asmx"
            )
            assert proxy.timeout_s == 7

    def test_empty_uri_rejected(self) -> None:
        with pytest.raises(ProxyCreationError):
            new_web_service_proxy("   ", settings=ConnectionSettings())

    def test_non_http_uri_rejected(self) -> None:
        settings = ConnectionSettings(report_server_uri="ftp://rs/reportserver")
        with pytest.raises(ProxyCreationError) as exc_info:
            new_web_service_proxy(settings=settings)
        assert exc_info.value.context["report_server_uri"] == "ftp://rs/reportserver"
