"""
SOAP client for the report server's ReportService2010 endpoint.

Only the operations used by rstools commands are implemented.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Final

import requests
from requests.auth import HTTPBasicAuth

from ..config import load_settings
from ..exceptions import ProxyCreationError, ReportServerError
from ..models import ConnectionSettings, Credentials, Property

logger = logging.getLogger(__name__)

ENDPOINT: Final[str] = "ReportService2010.asmx"
RS_NAMESPACE: Final[str] = (
    "http://schemas.microsoft.com/sqlserver/reporting/2010/03/01/ReportServer"
)
SOAP_NAMESPACE: Final[str] = "http://schemas.xmlsoap.org/soap/envelope/"


def build_endpoint_url(report_server_uri: str) -> str:
    """
    Return the SOAP endpoint URL for a report server URI.

    Accepts URIs that already point at the ``.asmx`` endpoint.
    """
    uri = report_server_uri.strip()
    if uri.lower().endswith(".asmx"):
        return uri
    return f"{uri.rstrip('/')}/{ENDPOINT}"


def build_create_linked_item_envelope(
    name: str, parent: str, link: str, properties: list[Property]
) -> bytes:
    """Serialize a CreateLinkedItem request into a SOAP 1.1 envelope."""
    envelope = ET.Element(f"{{{SOAP_NAMESPACE}}}Envelope")
    body = ET.SubElement(envelope, f"{{{SOAP_NAMESPACE}}}Body")
    request = ET.SubElement(body, f"{{{RS_NAMESPACE}}}CreateLinkedItem")

    # ItemPath is the name of the new item, not a full path
    ET.SubElement(request, f"{{{RS_NAMESPACE}}}ItemPath").text = name
    ET.SubElement(request, f"{{{RS_NAMESPACE}}}Parent").text = parent
    ET.SubElement(request, f"{{{RS_NAMESPACE}}}Link").text = link

    if properties:
        props_el = ET.SubElement(request, f"{{{RS_NAMESPACE}}}Properties")
        for prop in properties:
            prop_el = ET.SubElement(props_el, f"{{{RS_NAMESPACE}}}Property")
            ET.SubElement(prop_el, f"{{{RS_NAMESPACE}}}Name").text = prop.name
            ET.SubElement(prop_el, f"{{{RS_NAMESPACE}}}Value").text = prop.value

    return ET.tostring(envelope, encoding="utf-8", xml_declaration=True)


def parse_soap_fault(content: bytes) -> tuple[str, str] | None:
    """
    Extract ``(faultcode, faultstring)`` from a SOAP response.

    Returns None when the response is not a fault or is not XML.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError:
        return None

    fault = root.find(f".//{{{SOAP_NAMESPACE}}}Fault")
    if fault is None:
        return None

    fault_code = (fault.findtext("faultcode") or "").strip()
    fault_string = (fault.findtext("faultstring") or "").strip()
    return fault_code, fault_string or "Unknown SOAP fault"


class WebServiceProxy:
    """
    Authenticated client for the report server web service.

    Holds one ``requests.Session`` for the lifetime of the proxy.
    """

    def __init__(
        self,
        endpoint_url: str,
        credentials: Credentials | None = None,
        timeout_s: float = 60,
        verify_ssl: bool = True,
        session: requests.Session | None = None,
    ) -> None:
        self.endpoint_url = endpoint_url
        self.timeout_s = timeout_s
        self._session = session or requests.Session()
        self._session.verify = verify_ssl
        if credentials is not None:
            self._session.auth = HTTPBasicAuth(
                credentials.login, credentials.password.get_secret_value()
            )
        self._logger = logger.getChild(self.__class__.__name__)

    def _call(self, action: str, envelope: bytes) -> bytes:
        headers = {
            "Content-Type": "text/xml; charset=utf-8",
            "SOAPAction": f'"{RS_NAMESPACE}/{action}"',
        }
        self._logger.debug(f"POST {action} to {self.endpoint_url}")

        try:
            response = self._session.post(
                self.endpoint_url,
                data=envelope,
                headers=headers,
                timeout=self.timeout_s,
            )
        except requests.RequestException as e:
            raise ReportServerError(
                f"Could not reach report server at {self.endpoint_url}: {e}"
            ) from e

        fault = parse_soap_fault(response.content)
        if fault is not None:
            fault_code, fault_string = fault
            raise ReportServerError(
                fault_string,
                status_code=response.status_code,
                fault_code=fault_code,
            )

        if not response.ok:
            raise ReportServerError(
                f"{action} failed with HTTP {response.status_code}: "
                f"{response.reason}",
                status_code=response.status_code,
            )

        return response.content

    def create_linked_item(
        self,
        name: str,
        parent: str,
        link: str,
        properties: list[Property],
    ) -> None:
        """
        Create a linked report named ``name`` in ``parent`` pointing at ``link``.

        Raises:
            ReportServerError: If the request fails or the server returns a fault.
        """
        envelope = build_create_linked_item_envelope(name, parent, link, properties)
        self._call("CreateLinkedItem", envelope)

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    def __enter__(self) -> "WebServiceProxy":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def new_web_service_proxy(
    report_server_uri: str | None = None,
    credentials: Credentials | None = None,
    settings: ConnectionSettings | None = None,
    config_file: str | Path | None = None,
) -> WebServiceProxy:
    """
    Build a proxy for the report server.

    Args:
        report_server_uri: Server URI. Falls back to the configured settings.
        credentials: Credentials. Fall back to the configured settings.
        settings: Pre-resolved settings. Loaded with ``load_settings`` if None.
        config_file: Settings file passed to ``load_settings``. Ignored when
            settings are given.

    Returns:
        A ready-to-use WebServiceProxy

    Raises:
        ProxyCreationError: If no usable server URI is available.
    """
    if report_server_uri is not None and not report_server_uri.strip():
        raise ProxyCreationError("Report server URI cannot be empty")

    if settings is None:
        settings = load_settings(
            config_file=config_file,
            report_server_uri=report_server_uri,
            credentials=credentials,
        )
    else:
        updates: dict = {}
        if report_server_uri:
            updates["report_server_uri"] = report_server_uri.strip()
        if credentials is not None:
            updates["credentials"] = credentials
        if updates:
            settings = settings.model_copy(update=updates)

    if not settings.report_server_uri.lower().startswith(("http://", "https://")):
        raise ProxyCreationError(
            "Report server URI must use http or https",
            report_server_uri=settings.report_server_uri,
        )

    endpoint_url = build_endpoint_url(settings.report_server_uri)
    logger.info(f"Connecting to report server: {endpoint_url}")
    return WebServiceProxy(
        endpoint_url,
        credentials=settings.credentials,
        timeout_s=settings.timeout_s,
        verify_ssl=settings.verify_ssl,
    )
