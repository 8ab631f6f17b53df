"""
Adding dishes to a restaurant's menu.
"""
import logging
import math
import mimetypes
import traceback
from datetime import datetime, timezone
from auth import require_business, require_restaurant
from errors import ValidationError
from transformation.records import Dish

logger = logging.getLogger(__name__)

DISH_BUCKET = 'dishes'
MAX_IMAGE_BYTES = 10 * 1024 * 1024
REQUIRED_FIELDS = ('name', 'category', 'price', 'description')


def _validate_fields(fields):
    missing = [name for name in REQUIRED_FIELDS if not str(fields.get(name) or '').strip()]
    if missing:
        raise ValidationError(f"Missing required dish fields: {', '.join(missing)}")

    try:
        price = float(fields['price'])
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid dish price: {fields['price']!r}") from None
    if not math.isfinite(price):
        raise ValidationError(f"Invalid dish price: {fields['price']!r}")
    if price < 0:
        raise ValidationError("Price cannot be negative")
    return price


def _validate_image(image):
    """Check an `(filename, content)` pair; returns the file extension and content type."""
    filename, content = image
    extension = filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''
    content_type = mimetypes.guess_type(filename)[0] or ''

    if not extension or not content_type.startswith('image/'):
        raise ValidationError(f"Not an image file: {filename}")
    if len(content) > MAX_IMAGE_BYTES:
        raise ValidationError(f"Image {filename} is larger than 10MB")
    return extension, content_type


def create_dish(store, storage, session, fields, image=None):
    """
    Add a dish to the session's restaurant.

    Args:
        store: document store
        storage: object storage client, used only when an image is given
        session: signed-in business session linked to a restaurant
        fields: name, category, price and description of the dish
        image: optional (filename, bytes) pair

    Returns:
        The new dish id. The image is stored in the dishes bucket as
        `<dish id>.<extension>` and that path is saved as the dish's imageUrl.
    """
    require_business(session)
    restaurant_id = require_restaurant(session)
    price = _validate_fields(fields)
    if image is not None:
        extension, content_type = _validate_image(image)

    dish_id = store.add(Dish.collection, {
        'name': str(fields['name']).strip(),
        'category': str(fields['category']).strip(),
        'price': price,
        'description': str(fields['description']).strip(),
        'restaurantId': restaurant_id,
        'imageUrl': '',
        'createdAt': datetime.now(timezone.utc),
    })
    logger.info(f"Added dish {dish_id} to restaurant {restaurant_id}")

    if image is not None:
        image_path = f"{dish_id}.{extension}"
        try:
            storage.upload(DISH_BUCKET, image_path, image[1], content_type=content_type)
        except Exception as e:
            logger.error(f"Image upload for dish {dish_id} failed: {str(e)}")
            logger.error(traceback.format_exc())
            raise
        store.update(Dish.collection, dish_id, {'imageUrl': image_path})

    return dish_id
