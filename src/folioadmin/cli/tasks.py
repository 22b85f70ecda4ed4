import os
import uuid

import structlog
from dotenv import load_dotenv
from invoke import Context, task

from ..logging_config import bind_request_context, clear_request_context
from ..models.content import ContentCategory
from ..services.content_index import ContentIndexService, JsonFileIndexStore
from ..services.image_processor import get_image_processor
from ..services.storage import get_object_store
from ..services.uploads import UploadProcessor, UploadUrlIssuer, content_type_for, file_extension

logger = structlog.get_logger()


def _load_env(env_file: str) -> None:
    if os.path.exists(env_file):
        logger.info("loading_env_file", env_file=env_file)
        load_dotenv(dotenv_path=env_file)
    else:
        logger.warning("env_file_not_found", env_file=env_file)


def find_images(directory: str, allowed_extensions: tuple[str, ...], recursive: bool = False) -> list[str]:
    """Sorted paths of files under directory whose extension is allowed."""
    image_files = []
    if recursive:
        for root, _, files in os.walk(directory):
            for name in files:
                if file_extension(name) in allowed_extensions:
                    image_files.append(os.path.join(root, name))
    else:
        for name in os.listdir(directory):
            path = os.path.join(directory, name)
            if os.path.isfile(path) and file_extension(name) in allowed_extensions:
                image_files.append(path)
    return sorted(image_files)


def title_from_filename(filename: str) -> str:
    """'sunset_over-bay.jpg' -> 'Sunset Over Bay'."""
    stem = os.path.splitext(os.path.basename(filename))[0]
    words = stem.replace("_", " ").replace("-", " ").split()
    return " ".join(word.capitalize() for word in words) or stem


@task
def init_content(c: Context, content_dir: str | None = None, env_file: str = ".env"):
    """
    Create empty index documents for categories that have none yet.

    Args:
        content_dir (str): Directory holding the index files. Defaults to CONTENT_DIR.
        env_file (str): Path to the environment file. Default is '.env'.
    """
    _load_env(env_file)
    store = JsonFileIndexStore(content_dir)

    for category in ContentCategory:
        created = store.initialize(category)
        logger.info("content_index_initialized", category=category.value, created=created)
        print(f"{store.path_for(category)}: {'created' if created else 'exists'}")


@task
def batch_upload(
    c: Context,
    directory: str,
    category: str = "gallery",
    label: str = "",
    env_file: str = ".env",
    recursive: bool = False,
    dry_run: bool = False,
):
    """
    Publish images from a local directory in batch.

    Args:
        c (Context): Invoke context.
        directory (str): Path to the directory containing images.
        category (str): Target category: 'gallery' or 'photos360'. Default is 'gallery'.
        label (str): Display category for the records. Defaults to Uncategorized.
        env_file (str): Path to the environment file. Default is '.env'.
        recursive (bool): Search for images in subdirectories. Default is False.
        dry_run (bool): If True, lists files to be processed without uploading. Default is False.
    """
    _load_env(env_file)

    if not os.path.isdir(directory):
        logger.error("directory_not_found", directory=directory)
        return

    target = ContentCategory.parse(category)
    if not target.settings.accepts_uploads:
        logger.error("category_not_uploadable", category=target.value)
        return

    image_files = find_images(directory, target.settings.allowed_extensions, recursive)
    if not image_files:
        logger.warning("no_images_found", directory=directory)
        return

    logger.info(
        "batch_upload_starting",
        directory=directory,
        category=target.value,
        files=len(image_files),
        recursive=recursive,
        dry_run=dry_run,
    )

    if dry_run:
        print("\n--- Dry Run Mode: Files to be processed ---")
        for file_path in image_files:
            print(f"- {file_path} -> {title_from_filename(file_path)}")
        print("--- End of Dry Run ---")
        return

    object_store = get_object_store()
    issuer = UploadUrlIssuer(object_store)
    processor = UploadProcessor(object_store, ContentIndexService(JsonFileIndexStore()), get_image_processor())

    successful_uploads = 0
    failed_uploads = 0

    # Every event of this run carries the batch id
    bind_request_context(batch_id=uuid.uuid4().hex, category=target.value)
    try:
        for file_path in image_files:
            filename = os.path.basename(file_path)
            try:
                with open(file_path, "rb") as f:
                    file_data = f.read()

                content_type = content_type_for(filename)
                key = issuer.stage(target, filename, content_type, file_data)
                result = processor.process(target, key, title_from_filename(filename), category_label=label or None)

                logger.info("batch_item_published", filename=filename, record_id=result.record["id"], **result.stats)
                successful_uploads += 1
            except Exception as e:
                logger.error("batch_item_failed", filename=filename, error=str(e), error_type=type(e).__name__)
                failed_uploads += 1
    finally:
        clear_request_context()

    logger.info(
        "batch_upload_finished",
        successful=successful_uploads,
        failed=failed_uploads,
        total=len(image_files),
    )
    print(f"\nBatch upload complete. Successful: {successful_uploads}, Failed: {failed_uploads}")


@task
def serve(c: Context, host: str = "127.0.0.1", port: int = 8000, env_file: str = ".env"):
    """
    Run the JSON API with uvicorn.

    Args:
        host (str): Interface to bind. Default is '127.0.0.1'.
        port (int): Port to listen on. Default is 8000.
        env_file (str): Path to the environment file. Default is '.env'.
    """
    import uvicorn

    from ..api import create_app

    _load_env(env_file)
    uvicorn.run(create_app(), host=host, port=port)
