import asyncio

import httpx
import pytest

from gallery.application.services.assistant_service import WELCOME_FALLBACK_TEXT, AssistantService
from gallery.client.api_client import ApiError, GalleryApiClient
from gallery.client.config import ClientSettings
from gallery.client.models import SelectedFile, UploadStatus
from gallery.client.session import UploaderSession
from gallery.config import Settings
from gallery.infrastructure.persistence.memory.image_repository_memory import InMemoryImageRepository
from gallery.main import create_app
from gallery.validation import MAX_FILE_SIZE


def make_session(max_file_size=MAX_FILE_SIZE, assistant=None):
    app = create_app(
        Settings(STORAGE_BACKEND="memory", MAX_FILE_SIZE=max_file_size),
        image_repo=InMemoryImageRepository(),
        assistant=assistant or AssistantService(),
    )
    api = GalleryApiClient("http://testserver", transport=httpx.ASGITransport(app=app))
    settings = ClientSettings(
        PROGRESS_TICK_S=0.01,
        SUCCESS_REMOVAL_DELAY_S=0.05,
        NOTIFICATION_DISMISS_S=60,
        MAX_FILE_SIZE=max_file_size,
    )
    return UploaderSession(api, settings)


def jpeg(name, size=64):
    return SelectedFile(name=name, content=b"\xff\xd8" + b"\x01" * size, content_type="image/jpeg")


@pytest.mark.asyncio
async def test_select_upload_and_list_newest_first():
    session = make_session()
    await session.start()
    assert session.gallery.images == []

    text = SelectedFile(name="notes.txt", content=b"hello", content_type="text/plain")
    result = session.select([jpeg("one.jpg"), jpeg("two.jpg", 128), text])
    assert len(result.accepted) == 2
    assert len(result.rejected) == 1
    assert session.notifications.events[-1].title == "Unsupported file type"
    assert [f.name for f in session.selected] == ["one.jpg", "two.jpg"]

    task_ids = session.upload()
    assert len(task_ids) == 2
    await session.uploads.wait_idle()

    assert all(session.uploads.tasks.get(t).status is UploadStatus.SUCCESS for t in task_ids)
    assert session.selected == []
    assert [i.originalname for i in session.gallery.images] == ["two.jpg", "one.jpg"]
    assert session.gallery.images[0].size == 130
    assert session.notifications.events[-1].title == "Upload Successful"

    await asyncio.sleep(0.1)
    assert len(session.uploads.tasks) == 0
    await session.close()


@pytest.mark.asyncio
async def test_only_invalid_files_is_a_hard_rejection():
    session = make_session()
    result = session.select([SelectedFile("a.pdf", b"%PDF", "application/pdf")])
    assert result.accepted == []
    assert session.notifications.events[-1].title == "Invalid files"
    assert session.selected == []
    assert session.upload() == []
    await session.close()


@pytest.mark.asyncio
async def test_server_rejection_marks_batch_failed_then_retry():
    session = make_session()
    # bypass the client filter: the server must still refuse the whole batch
    session.selected = [jpeg("ok.jpg"), SelectedFile("fake.jpg", b"text", "text/plain")]
    ids = session.upload()
    await session.uploads.wait_idle()

    tasks = [session.uploads.tasks.get(t) for t in ids]
    assert all(t.status is UploadStatus.ERROR for t in tasks)
    assert tasks[0].error == "Invalid image data"
    assert await session.api.list_images() == []
    assert len(session.selected) == 2

    assert session.retry(ids[0]) is True
    await session.uploads.wait_idle()
    assert session.uploads.tasks.get(ids[0]).status is UploadStatus.SUCCESS
    assert [i.originalname for i in session.gallery.images] == ["ok.jpg"]
    assert [f.name for f in session.selected] == ["fake.jpg"]
    await session.close()


@pytest.mark.asyncio
async def test_delete_twice_through_the_client():
    session = make_session()
    session.select([jpeg("a.jpg")])
    session.upload()
    await session.uploads.wait_idle()
    image_id = session.gallery.images[0].id

    assert await session.delete_image(image_id) is True
    assert session.gallery.images == []
    with pytest.raises(ApiError) as exc:
        await session.api.delete_image(image_id)
    assert exc.value.status_code == 404
    await session.close()


@pytest.mark.asyncio
async def test_raw_bytes_and_download(tmp_path):
    session = make_session()
    session.select([jpeg("photo.jpg")])
    session.upload()
    await session.uploads.wait_idle()
    image = session.gallery.images[0]

    raw = await session.api.get_image_bytes(image.id)
    assert raw == jpeg("photo.jpg").content
    assert session.gallery.download(image, tmp_path).read_bytes() == raw
    assert session.gallery.share_url(image) == f"http://testserver/images/{image.id}"
    await session.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("max_file_size", [MAX_FILE_SIZE, 100])
@pytest.mark.parametrize("candidate", [
    SelectedFile("upper.jpg", b"\xff\xd8data", "image/JPEG"),
    SelectedFile("empty.png", b"", "image/png"),
    SelectedFile("params.gif", b"GIF89a", "image/gif; name=params.gif"),
    SelectedFile("medium.jpg", b"\xff\xd8" + b"\x01" * 200, "image/jpeg"),
    SelectedFile("notes.txt", b"hello", "text/plain"),
])
async def test_client_filter_and_server_agree(candidate, max_file_size):
    session = make_session(max_file_size=max_file_size)
    accepted_locally = session.select([candidate]).accepted == [candidate]

    try:
        await session.api.upload([candidate])
        accepted_by_server = True
    except ApiError as e:
        assert e.status_code == 400
        accepted_by_server = False

    assert accepted_locally == accepted_by_server
    await session.close()


@pytest.mark.asyncio
async def test_assistant_calls_through_the_client():
    class CannedText:
        def generate_text(self, system_prompt, prompt, max_tokens):
            return f"You asked: {prompt}"

    session = make_session(assistant=AssistantService(text_provider=CannedText()))

    reply = await session.api.ask_assistant("How do I upload?", include_image=True)
    assert reply == {"text": "You asked: How do I upload?"}

    welcome = await session.api.welcome()
    assert welcome == {"text": WELCOME_FALLBACK_TEXT}

    with pytest.raises(ApiError) as exc:
        await session.api.ask_assistant("")
    assert exc.value.status_code == 400
    assert str(exc.value) == "Query is required and must be a string"
    await session.close()
