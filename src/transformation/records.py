"""
Typed records for the document collections the reports read.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from errors import MissingFieldError
from transformation.quality import parse_timestamp

INTERACTION_TYPES = ('like', 'comment', 'view')


def _require(doc, name, collection):
    value = doc.get(name)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise MissingFieldError(collection, doc.get('id', '?'), name)
    return value


def _number(value, default=0.0):
    if value is None or value == '':
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    # nan and inf parse as floats but are not usable amounts
    if not math.isfinite(number):
        return default
    return number


@dataclass(frozen=True)
class LineItem:
    name: str
    quantity: int = 1
    price: float = 0.0

    @property
    def line_total(self):
        return self.quantity * self.price


@dataclass(frozen=True)
class Order:
    collection = 'orders'

    id: str
    restaurant_id: str
    status: str = 'pending'
    created_at: Optional[datetime] = None
    total_price: float = 0.0
    items: Tuple[LineItem, ...] = ()
    user_id: Optional[str] = None

    @classmethod
    def from_document(cls, doc):
        order_id = str(_require(doc, 'id', cls.collection))
        items = []
        for raw in doc.get('items') or []:
            name = raw.get('name')
            if not name:
                raise MissingFieldError(cls.collection, order_id, 'items.name')
            items.append(LineItem(
                name=str(name),
                quantity=int(_number(raw.get('quantity'), 1)),
                price=_number(raw.get('price'))
            ))

        total = doc.get('totalPrice')
        return cls(
            id=order_id,
            restaurant_id=str(_require(doc, 'restaurantId', cls.collection)),
            status=str(doc.get('status') or 'pending').lower(),
            created_at=parse_timestamp(doc.get('createdAt')),
            total_price=_number(total) if total is not None else sum(i.line_total for i in items),
            items=tuple(items),
            user_id=doc.get('userId')
        )

    @property
    def item_names(self):
        return [item.name for item in self.items]


@dataclass(frozen=True)
class Interaction:
    collection = 'interactions'

    id: str
    type: str
    user_id: str
    target_id: str
    timestamp: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc):
        return cls(
            id=str(_require(doc, 'id', cls.collection)),
            type=str(_require(doc, 'type', cls.collection)).lower(),
            user_id=str(_require(doc, 'userId', cls.collection)),
            target_id=str(_require(doc, 'targetId', cls.collection)),
            timestamp=parse_timestamp(doc.get('timestamp'))
        )


@dataclass(frozen=True)
class Dish:
    collection = 'dishes'

    id: str
    name: str
    category: Optional[str] = None
    price: float = 0.0
    restaurant_id: Optional[str] = None
    image_url: Optional[str] = None
    description: str = ''
    created_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc):
        return cls(
            id=str(_require(doc, 'id', cls.collection)),
            name=str(_require(doc, 'name', cls.collection)),
            category=doc.get('category'),
            price=_number(doc.get('price')),
            restaurant_id=doc.get('restaurantId'),
            image_url=doc.get('imageUrl') or None,
            description=doc.get('description') or '',
            created_at=parse_timestamp(doc.get('createdAt'))
        )


@dataclass(frozen=True)
class Video:
    collection = 'videos'

    id: str
    uploader_id: str = 'Unknown'
    caption: str = '(No caption)'
    uploaded_at: Optional[datetime] = None
    views: int = 0

    @classmethod
    def from_document(cls, doc):
        return cls(
            id=str(_require(doc, 'id', cls.collection)),
            uploader_id=doc.get('uploaderId') or 'Unknown',
            caption=doc.get('caption') or '(No caption)',
            uploaded_at=parse_timestamp(doc.get('uploadedAt')),
            views=int(_number(doc.get('views'), 0))
        )


@dataclass(frozen=True)
class UserProfile:
    collection = 'users'

    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    roles: Dict[str, bool] = field(default_factory=dict)
    restaurant_id: Optional[str] = None

    @classmethod
    def from_document(cls, doc):
        return cls(
            id=str(_require(doc, 'id', cls.collection)),
            name=doc.get('displayname') or doc.get('displayName') or doc.get('name'),
            email=doc.get('email'),
            roles=dict(doc.get('roles') or {}),
            restaurant_id=doc.get('restaurantId') or None
        )

    @property
    def display_name(self):
        return self.name or self.email or self.id


@dataclass(frozen=True)
class Application:
    collection = 'applications'

    id: str
    uploader_id: str
    status: str = 'pending'
    submitted_at: Optional[datetime] = None
    restaurant_name: Optional[str] = None
    address: Dict[str, str] = field(default_factory=dict)
    photo_urls: Dict[str, str] = field(default_factory=dict)
    additional_file_urls: List[str] = field(default_factory=list)
    raw: Dict[str, object] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_document(cls, doc):
        return cls(
            id=str(_require(doc, 'id', cls.collection)),
            uploader_id=str(_require(doc, 'uploaderId', cls.collection)),
            status=str(doc.get('status') or 'pending').lower(),
            submitted_at=parse_timestamp(doc.get('submittedAt')),
            restaurant_name=doc.get('restaurantName'),
            address=dict(doc.get('address') or {}),
            photo_urls=dict(doc.get('photoURLs') or {}),
            additional_file_urls=list(doc.get('additionalFileURLs') or []),
            raw=dict(doc)
        )

    @property
    def location(self):
        if not self.address:
            return None
        parts = [self.address.get(key) for key in ('street', 'barangay', 'city', 'province')]
        return ', '.join(part for part in parts if part)


@dataclass(frozen=True)
class VideoReport:
    collection = 'reports'

    id: str
    video_id: str
    reason: Optional[str] = None
    additional_details: str = ''
    timestamp: Optional[datetime] = None
    user_id: Optional[str] = None

    @classmethod
    def from_document(cls, doc):
        return cls(
            id=str(_require(doc, 'id', cls.collection)),
            video_id=str(_require(doc, 'videoId', cls.collection)),
            reason=doc.get('reason'),
            additional_details=doc.get('additionalDetails') or '',
            timestamp=parse_timestamp(doc.get('timestamp')),
            user_id=doc.get('userId')
        )
