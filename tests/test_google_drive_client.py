"""Tests for drive_index.integrations.google_drive_client.GoogleDrive

These run the whole stack (token manager, executor, resolver, listing)
against a fake aiohttp session.
"""
import pytest

from drive_index.integrations.errors import NotFound, RangeReadFailure, RequestFailure
from drive_index.integrations.views import FileView, FolderView
from fakes import FakeHttp, FakeResp, error_resp, file, files_resp, folder, make_drive, token_resp

FILES_URL = "https://www.googleapis.com/drive/v3/files"


@pytest.mark.asyncio
async def test_index_root_needs_no_network():
    http = FakeHttp()
    drive = make_drive(http, seeded=False, root_id="root-folder")

    view = await drive.index()

    assert isinstance(view, FolderView)
    assert view.is_folder
    assert view.metadata.id == "root-folder"
    assert http.get_calls == [] and http.post_calls == []


@pytest.mark.asyncio
async def test_index_folder_lists_children():
    http = FakeHttp(get=[
        files_resp(folder("id-docs", "docs")),
        files_resp(folder("id-sub", "sub"), file("id-a", "a.txt"), next_page_token="p2"),
        files_resp(file("id-b", "b.txt")),
    ])
    drive = make_drive(http)

    view = await drive.index("docs")
    children = await view.list()

    assert isinstance(view, FolderView)
    assert not hasattr(view, "raw")
    assert [(c.id, c.is_folder) for c in children] == [("id-sub", True), ("id-a", False), ("id-b", False)]
    listing_call = http.get_calls[1]
    assert listing_call["params"]["q"] == "'id-docs' in parents and trashed = false and name != '.password'"
    assert http.get_calls[2]["params"]["pageToken"] == "p2"


@pytest.mark.asyncio
async def test_index_file_reads_raw_bytes_with_range():
    media = FakeResp(status=206, content_chunks=[b"he", b"ll"], headers={
        "Content-Type": "text/plain",
        "Content-Range": "bytes 0-3/10",
        "X-Goog-Internal": "dropped",
    })
    http = FakeHttp(get=[files_resp(file("id-a", "a.txt")), media])
    drive = make_drive(http)

    view = await drive.index("/a.txt")
    raw = await view.raw("bytes=0-3")
    data = b"".join([chunk async for chunk in raw.iter_chunked()])

    assert isinstance(view, FileView)
    assert not hasattr(view, "list")
    assert data == b"hell"
    assert raw.status == 206
    assert raw.headers == {"Content-Type": "text/plain", "Content-Range": "bytes 0-3/10"}
    assert media.released
    media_call = http.get_calls[1]
    assert media_call["url"] == f"{FILES_URL}/id-a"
    assert media_call["params"] == {"alt": "media"}
    assert media_call["headers"] == {"Authorization": "Bearer seeded-token", "Range": "bytes=0-3"}


@pytest.mark.asyncio
async def test_raw_without_range_sends_no_range_header():
    http = FakeHttp(get=[files_resp(file("id-a", "a.txt")), FakeResp(content_chunks=[b"abc"])])
    drive = make_drive(http)

    view = await drive.index("a.txt")
    raw = await view.raw()

    assert await raw.read() == b"abc"
    assert "Range" not in http.get_calls[1]["headers"]


@pytest.mark.asyncio
async def test_raw_error_surfaces_status_and_message():
    failing = error_resp(416, "Request range not satisfiable")
    http = FakeHttp(get=[files_resp(file("id-a", "a.txt")), failing])
    drive = make_drive(http)

    view = await drive.index("a.txt")
    with pytest.raises(RangeReadFailure) as exc_info:
        await view.raw("bytes=100-200")

    assert exc_info.value.status == 416
    assert exc_info.value.message == "Request range not satisfiable"
    assert failing.released


@pytest.mark.asyncio
async def test_missing_path_raises_not_found():
    http = FakeHttp(get=[files_resp()])
    drive = make_drive(http)

    with pytest.raises(NotFound) as exc_info:
        await drive.index("nope/deeper")

    assert exc_info.value.status == 404
    assert exc_info.value.message == "Path not found"
    # the second segment was never queried
    assert len(http.get_calls) == 1


@pytest.mark.asyncio
async def test_request_failure_propagates_from_index():
    http = FakeHttp(get=[error_resp(500, "Internal Error")])
    drive = make_drive(http)

    with pytest.raises(RequestFailure) as exc_info:
        await drive.index("a")

    assert exc_info.value.status == 500


@pytest.mark.asyncio
async def test_first_request_authorizes_once():
    http = FakeHttp(
        post=[token_resp("fresh-token")],
        get=[files_resp(folder("id-a", "a")), files_resp(folder("id-b", "b"))],
    )
    drive = make_drive(http, seeded=False)

    await drive.index("a")
    await drive.index("a/b")

    assert len(http.post_calls) == 1
    assert all(c["headers"]["Authorization"] == "Bearer fresh-token" for c in http.get_calls)


@pytest.mark.asyncio
async def test_authorize_is_idempotent():
    http = FakeHttp(post=[token_resp()])
    drive = make_drive(http, seeded=False)

    await drive.authorize()
    await drive.authorize()

    assert len(http.post_calls) == 1


@pytest.mark.asyncio
async def test_rate_limited_lookup_is_invisible_to_caller():
    http = FakeHttp(get=[
        error_resp(403, "User Rate Limit Exceeded"),
        files_resp(file("id-a", "a.txt")),
    ])
    drive = make_drive(http)

    view = await drive.index("a.txt")

    assert view.metadata.id == "id-a"
    assert len(http.get_calls) == 2


@pytest.mark.asyncio
async def test_clients_do_not_share_cache():
    http = FakeHttp(get=[files_resp(file("id-1", "a.txt")), files_resp(file("id-2", "a.txt"))])
    first = make_drive(http)
    second = make_drive(http)

    assert (await first.index("a.txt")).metadata.id == "id-1"
    assert (await second.index("a.txt")).metadata.id == "id-2"


@pytest.mark.asyncio
async def test_injected_session_is_left_open():
    http = FakeHttp()
    async with make_drive(http):
        pass

    assert not http.closed


def test_view_to_dict_uses_api_field_names():
    from drive_index.integrations.models import RemoteObject

    obj = RemoteObject.from_api(file("id-a", "a.txt", size=42))

    assert obj.to_dict() == {
        "id": "id-a",
        "name": "a.txt",
        "mimeType": "text/plain",
        "size": 42,
        "modifiedTime": "2023-05-01T10:00:00+00:00",
        "isFolder": False,
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("payload, message", [
    (["backend error"], "['backend error']"),
    ("Service Unavailable", "Service Unavailable"),
])
async def test_raw_error_with_non_object_body(payload, message):
    failing = FakeResp(status=503, json_payload=payload)
    http = FakeHttp(get=[files_resp(file("id-a", "a.txt")), failing])
    drive = make_drive(http)

    view = await drive.index("a.txt")
    with pytest.raises(RangeReadFailure) as exc_info:
        await view.raw()

    assert exc_info.value.status == 503
    assert exc_info.value.message == message
    assert failing.released
