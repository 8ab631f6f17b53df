"""
Write flows behind the applications and reported-videos pages.
"""
import logging
from datetime import datetime, timezone
from db.store import Where
from errors import DocumentNotFoundError, StorageError
from transformation.records import Application, UserProfile, Video, VideoReport

logger = logging.getLogger(__name__)

PHOTO_KEYS = ('coverURL', 'selfieURL', 'validIdURL', 'selfieWithValidIdURL', 'displayURL')

# Owner details copied from the application onto the restaurant
_OWNER_FIELDS = ('fullName', 'sex', 'age', 'civilStatus', 'birthdate', 'nationality', 'occupation')


def _restaurant_from_application(application):
    raw = application.raw
    try:
        average_income = float(raw.get('averageIncome') or 0)
    except (TypeError, ValueError):
        average_income = 0.0

    restaurant = {
        'ownerId': application.uploader_id,
        'name': application.restaurant_name or 'Unnamed Restaurant',
        'phone': raw.get('phone') or '',
        'averageIncome': average_income,
        'address': application.address,
        'businessHours': raw.get('businessHours') or {},
        'deliveryAreas': raw.get('deliveryAreas') or [],
        'createdAt': datetime.now(timezone.utc),
    }
    for field in _OWNER_FIELDS:
        restaurant[field] = raw.get(field) or ''
    return restaurant


def _copy_object(storage, source_url, target_path):
    """Copy one application upload into the restaurants bucket; None when it cannot be copied."""
    source_path = storage.relative_path(source_url, 'applications')
    if not source_path:
        return None
    try:
        content = storage.download('applications', source_path)
        return storage.upload('restaurants', target_path, content)
    except StorageError as e:
        logger.warning(f"Skipping {source_path}: {e}")
        return None


def accept_application(store, storage, application):
    """
    Turn an application into a restaurant.

    Creates the restaurant document, copies the application's photos into
    the restaurant's storage folder, marks the application accepted and
    grants the uploader the business role. Returns the new restaurant id.
    """
    if not isinstance(application, Application):
        application = Application.from_document(application)

    logger.info(f"Accepting application {application.id}")
    restaurant_id = store.add('restaurants', _restaurant_from_application(application))

    photo_urls = {}
    for key in PHOTO_KEYS:
        url = _copy_object(storage, application.photo_urls.get(key), f"{restaurant_id}/{key}")
        if url:
            photo_urls[key] = url

    additional_urls = []
    for index, source_url in enumerate(application.additional_file_urls):
        url = _copy_object(storage, source_url, f"{restaurant_id}/proof{index}")
        if url:
            additional_urls.append(url)

    store.update('restaurants', restaurant_id, {
        'photoURLs': photo_urls,
        'additionalFileURLs': additional_urls,
    })

    try:
        store.update(Application.collection, application.id, {'status': 'accepted'})
    except DocumentNotFoundError:
        logger.warning(f"Application {application.id} no longer exists, status not updated")

    try:
        store.update(UserProfile.collection, application.uploader_id, {
            'roles': {'user': True, 'business': True},
            'restaurantId': restaurant_id,
        })
    except DocumentNotFoundError:
        logger.warning(f"Uploader {application.uploader_id} has no user profile, roles not granted")

    logger.info(f"Application {application.id} accepted as restaurant {restaurant_id}")
    return restaurant_id


def update_application_status(store, application_id, status):
    store.update(Application.collection, application_id, {'status': status.lower()})


def delete_reported_video(store, video_id):
    """
    Delete a video and every report that references it.

    Returns the number of reports removed.
    """
    store.delete(Video.collection, video_id)

    removed = 0
    reports = store.query(VideoReport.collection, [Where('videoId', '==', video_id)])
    for report in reports:
        if store.delete(VideoReport.collection, report['id']):
            removed += 1

    logger.info(f"Deleted video {video_id} and {removed} reports")
    return removed
