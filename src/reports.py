"""
Report services for the restaurant dashboard.

Every report takes the signed-in session explicitly and recomputes from
freshly fetched records. Fetches that do not depend on each other are
issued concurrently and joined before any aggregation starts.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from auth import require_restaurant, require_session
from db.store import Where
from ingestion.fetcher import gather_fetches
from loading.chart import to_leaderboard_rows, to_pair_rows, to_table_rows, to_time_series
from transformation.calculations import (
    calculate_category_metrics,
    calculate_daily_interactions,
    calculate_daily_revenue,
    credit_likes,
    identify_dish_pairs,
    identify_most_liked,
    identify_top_customers,
    identify_top_dishes,
    verify_totals
)
from transformation.quality import normalize_records, run_data_quality_checks
from transformation.records import (
    Application, Dish, Interaction, Order, UserProfile, Video, VideoReport
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportWindow:
    """Inclusive timestamp range; a missing bound leaves that side open."""
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def filters(self, field):
        filters = []
        if self.start is not None:
            filters.append(Where(field, '>=', self.start))
        if self.end is not None:
            filters.append(Where(field, '<=', self.end))
        return filters


OPEN_WINDOW = ReportWindow()


def _iso(value):
    return value.isoformat() if value is not None else None


async def _fetch_names(fetcher, user_ids):
    documents = await fetcher.afetch_by_ids(UserProfile.collection, user_ids)
    profiles = normalize_records(documents, UserProfile)
    return {profile.id: profile.display_name for profile in profiles}


async def _fetch_restaurant_names(fetcher, restaurant_ids):
    documents = await fetcher.afetch_by_ids('restaurants', restaurant_ids)
    return {doc['id']: doc.get('name') for doc in documents if doc.get('name')}


async def build_sales_report(fetcher, session, settings, window=OPEN_WINDOW):
    """
    Revenue, category, dish and customer figures for the session's restaurant.

    Only orders with the configured completed status inside the window count.
    """
    restaurant_id = require_restaurant(session)
    logger.info(f"Building sales report for restaurant {restaurant_id}")

    fetched = await gather_fetches(
        orders=fetcher.afetch(Order.collection, [
            Where('restaurantId', '==', restaurant_id),
            Where('status', '==', settings.completed_status),
            *window.filters('createdAt'),
        ]),
        dishes=fetcher.afetch(Dish.collection, [
            Where('restaurantId', '==', restaurant_id),
        ]),
    )
    orders = normalize_records(fetched['orders'], Order)
    dishes = normalize_records(fetched['dishes'], Dish)
    run_data_quality_checks(orders, 'created_at')

    names = await _fetch_names(fetcher, [order.user_id for order in orders if order.user_id])

    return {
        'daily_revenue': to_time_series(calculate_daily_revenue(orders, settings.timezone)),
        'category_metrics': to_table_rows(calculate_category_metrics(orders, dishes)),
        'top_dishes': to_leaderboard_rows(identify_top_dishes(orders, settings.top_n)),
        'dish_pairs': to_pair_rows(identify_dish_pairs(orders, settings.top_n)),
        'top_customers': to_leaderboard_rows(
            identify_top_customers(orders, settings.top_n, names)
        ),
        'total_discrepancies': to_table_rows(verify_totals(orders)),
    }


async def build_engagement_report(fetcher, session, settings, window=OPEN_WINDOW):
    """
    Daily likes, comments and views plus the most liked users.
    """
    require_session(session)
    logger.info("Building engagement report")

    interaction_docs = await fetcher.afetch(
        Interaction.collection, window.filters('timestamp')
    )
    interactions = normalize_records(interaction_docs, Interaction)
    run_data_quality_checks(interactions, 'timestamp')

    liked_targets = [i.target_id for i in interactions if i.type == 'like']
    fetched = await gather_fetches(
        videos=fetcher.afetch_by_ids(Video.collection, liked_targets),
        names=_fetch_names(fetcher, [i.user_id for i in interactions]),
    )
    videos = normalize_records(fetched['videos'], Video)
    names = dict(fetched['names'])

    credited = credit_likes(interactions, videos, settings.credit_likes_to_owner)
    missing = [subject for subject in credited if subject not in names]
    if missing:
        names.update(await _fetch_names(fetcher, missing))

    most_liked = identify_most_liked(
        interactions, videos, settings.top_n, names, settings.credit_likes_to_owner
    )
    return {
        'daily_interactions': to_time_series(
            calculate_daily_interactions(interactions, settings.timezone)
        ),
        'most_liked': to_leaderboard_rows(most_liked),
    }


async def build_reported_videos(fetcher, session, settings):
    """
    Reported videos with their reports, most reported first.
    """
    require_session(session)

    report_docs = await fetcher.afetch(VideoReport.collection)
    # Reports not tied to a video cannot be shown against one
    reports = normalize_records(
        [doc for doc in report_docs if doc.get('videoId')], VideoReport
    )

    reports_by_video = {}
    for report in reports:
        reports_by_video.setdefault(report.video_id, []).append(report)
    if not reports_by_video:
        logger.info("No reported videos found")
        return {'reported_videos': []}

    video_docs = await fetcher.afetch_by_ids(Video.collection, list(reports_by_video))
    videos = normalize_records(video_docs, Video)

    rows = [
        {
            'video_id': video.id,
            'caption': video.caption,
            'uploader_id': video.uploader_id,
            'uploaded_at': _iso(video.uploaded_at),
            'views': video.views,
            'report_count': len(reports_by_video.get(video.id, [])),
            'reports': [
                {
                    'id': report.id,
                    'reason': report.reason,
                    'additional_details': report.additional_details,
                    'user_id': report.user_id,
                    'timestamp': _iso(report.timestamp),
                }
                for report in reports_by_video.get(video.id, [])
            ],
        }
        for video in videos
    ]
    rows.sort(key=lambda row: row['report_count'], reverse=True)
    logger.info(f"Found {len(rows)} reported videos")
    return {'reported_videos': rows}


async def list_applications(fetcher, session, settings):
    """
    Restaurant applications, newest first.
    """
    require_session(session)

    documents = await fetcher.afetch(
        Application.collection, order_by=('submittedAt', 'desc')
    )
    applications = normalize_records(documents, Application)
    return {
        'applications': [
            {
                'id': application.id,
                'uploader_id': application.uploader_id,
                'submitted_at': _iso(application.submitted_at),
                'status': application.status,
                'restaurant_name': application.restaurant_name,
                'location': application.location,
                'decided': application.status != 'pending',
            }
            for application in applications
        ]
    }


async def list_dishes(fetcher, session, settings, storage=None, restaurant_only=True):
    """
    Dishes, newest first, with restaurant names and image URLs.

    By default only the session's restaurant's dishes are listed.
    """
    filters = []
    if restaurant_only:
        filters.append(Where('restaurantId', '==', require_restaurant(session)))
    else:
        require_session(session)

    documents = await fetcher.afetch(Dish.collection, filters, order_by=('createdAt', 'desc'))
    dishes = normalize_records(documents, Dish)
    names = await _fetch_restaurant_names(
        fetcher, [dish.restaurant_id for dish in dishes if dish.restaurant_id]
    )

    def image_for(dish):
        if not dish.image_url:
            return None
        if storage is None:
            return dish.image_url
        return storage.public_url('dishes', dish.image_url)

    return {
        'dishes': [
            {
                'id': dish.id,
                'name': dish.name,
                'category': dish.category,
                'price': dish.price,
                'description': dish.description,
                'restaurant_name': names.get(dish.restaurant_id, 'Unknown Restaurant'),
                'image_url': image_for(dish),
                'created_at': _iso(dish.created_at),
            }
            for dish in dishes
        ]
    }


REPORTS = {
    'sales': build_sales_report,
    'engagement': build_engagement_report,
    'reported-videos': build_reported_videos,
    'applications': list_applications,
    'dishes': list_dishes,
}
