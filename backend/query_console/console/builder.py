from query_console.console.schemas import QueryMode, SubmissionRequest
from query_console.core.config import settings

CSV_MEDIA_TYPE = "text/csv"


def build_headers(credential: str, mode: QueryMode) -> dict[str, str]:
    headers = {
        "Content-Type": "application/json",
        # Sent even for an empty credential; the endpoint decides whether it is valid.
        "Authorization": f"Bearer {credential or ''}",
    }
    if mode == QueryMode.FILE_EXPORT:
        headers["Accept"] = CSV_MEDIA_TYPE
    return headers


def build_submission(
    query: str,
    credential: str,
    mode: QueryMode = QueryMode.INTERACTIVE,
    endpoint_url: str | None = None,
) -> SubmissionRequest:
    """Package a query and bearer credential for the federation query endpoint.

    The query text is forwarded untouched; syntax and credential checks belong
    to the endpoint.
    """
    return SubmissionRequest(
        url=endpoint_url or settings.query_endpoint_url,
        headers=build_headers(credential, mode),
        body={"query": query if query is not None else ""},
        mode=mode,
    )
