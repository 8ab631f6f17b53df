"""
Business metrics calculations for the dashboard reports.
"""
import logging
import traceback
import pandas as pd
from transformation.aggregation import accumulate, bucket_by_day
from transformation.cooccurrence import count_item_pairs
from transformation.leaderboard import rank_top_n

logger = logging.getLogger(__name__)

INTERACTION_SERIES = {
    'likes': 'like',
    'comments': 'comment',
    'views': 'view',
}


def calculate_daily_revenue(orders, timezone='UTC'):
    """
    Calculate revenue and order count per day.
    """
    try:
        logger.info(f"Calculating daily revenue for {len(orders)} orders")
        return bucket_by_day(
            orders,
            lambda order: order.created_at,
            {
                'revenue': lambda order: order.total_price,
                'orders': lambda order: 1,
            },
            timezone=timezone
        )
    except Exception as e:
        logger.error(f"Error calculating daily revenue: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def calculate_daily_interactions(interactions, timezone='UTC'):
    """
    Count likes, comments and views per day.
    """
    try:
        logger.info(f"Calculating daily interactions for {len(interactions)} records")
        series = {
            name: (lambda interaction, kind=kind: 1 if interaction.type == kind else 0)
            for name, kind in INTERACTION_SERIES.items()
        }
        return bucket_by_day(
            interactions,
            lambda interaction: interaction.timestamp,
            series,
            timezone=timezone
        )
    except Exception as e:
        logger.error(f"Error calculating daily interactions: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def identify_top_dishes(orders, top_n):
    """
    Identify top selling dishes by quantity sold.
    """
    try:
        logger.info("Identifying top selling dishes")
        line_items = [item for order in orders for item in order.items]
        totals = accumulate(line_items, lambda item: item.name, lambda item: item.quantity)
        top_dishes = rank_top_n(totals, top_n)
        logger.info(f"Identified {len(top_dishes)} top selling dishes")
        return top_dishes
    except Exception as e:
        logger.error(f"Error identifying top selling dishes: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def calculate_category_metrics(orders, dishes):
    """
    Calculate revenue and volume per menu category.

    Line items are matched to dishes by name; items with no matching dish
    fall under 'Unknown'.
    """
    columns = ['category', 'order_count', 'total_revenue', 'total_items_sold']
    try:
        logger.info("Calculating category metrics")
        categories = {dish.name: dish.category or 'Unknown' for dish in dishes}
        rows = [
            {
                'order_id': order.id,
                'category': categories.get(item.name, 'Unknown'),
                'quantity': item.quantity,
                'item_revenue': item.line_total,
            }
            for order in orders for item in order.items
        ]
        if not rows:
            return pd.DataFrame(columns=columns)

        unknown = sum(1 for row in rows if row['category'] == 'Unknown')
        if unknown:
            logger.warning(f"Found {unknown} order items with unknown menu items")

        category_metrics = pd.DataFrame(rows).groupby('category', sort=False).agg(
            order_count=('order_id', 'nunique'),
            total_revenue=('item_revenue', 'sum'),
            total_items_sold=('quantity', 'sum'),
        ).reset_index()

        # Sort by total revenue
        category_metrics = category_metrics.sort_values(
            'total_revenue', ascending=False, kind='stable'
        ).reset_index(drop=True)

        logger.info(f"Calculated metrics for {len(category_metrics)} categories")
        return category_metrics[columns]
    except Exception as e:
        logger.error(f"Error calculating category metrics: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def identify_top_customers(orders, top_n, names=None):
    """
    Rank customers by number of orders placed.
    """
    try:
        logger.info("Identifying top customers")
        totals = accumulate(orders, lambda order: order.user_id)
        return rank_top_n(totals, top_n, names)
    except Exception as e:
        logger.error(f"Error identifying top customers: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def credit_likes(interactions, videos, credit_owner=True):
    """
    Total likes per credited user.

    With `credit_owner` each like goes to the uploader of the liked video;
    likes whose target is not a known video are credited to the target id.
    Otherwise each like goes to the user who gave it.
    """
    owners = {video.id: video.uploader_id for video in videos}
    likes = [i for i in interactions if i.type == 'like']
    if credit_owner:
        return accumulate(likes, lambda like: owners.get(like.target_id, like.target_id))
    return accumulate(likes, lambda like: like.user_id)


def identify_most_liked(interactions, videos, top_n, names=None, credit_owner=True):
    """
    Rank users by likes received (or given, when `credit_owner` is off).
    """
    try:
        logger.info(f"Identifying most liked users (credit_owner={credit_owner})")
        totals = credit_likes(interactions, videos, credit_owner)
        return rank_top_n(totals, top_n, names)
    except Exception as e:
        logger.error(f"Error identifying most liked users: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def identify_dish_pairs(orders, top_n):
    """
    Rank pairs of dishes by the number of orders containing both.
    """
    try:
        logger.info("Identifying dishes ordered together")
        counts = count_item_pairs(order.item_names for order in orders)
        return rank_top_n(counts, top_n)
    except Exception as e:
        logger.error(f"Error identifying dish pairs: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def verify_totals(orders, tolerance=0.01):
    """
    Verify that order totals match the sum of their line items.

    Returns a DataFrame of the orders that differ by more than `tolerance`.
    """
    columns = ['order_id', 'total_price', 'calculated_total', 'difference']
    try:
        logger.info("Verifying order totals")
        rows = [
            {
                'order_id': order.id,
                'total_price': order.total_price,
                'calculated_total': sum(item.line_total for item in order.items),
            }
            for order in orders if order.items
        ]
        if not rows:
            return pd.DataFrame(columns=columns)

        totals = pd.DataFrame(rows)
        totals['difference'] = (totals['total_price'] - totals['calculated_total']).abs()
        discrepancies = totals[totals['difference'] > tolerance].reset_index(drop=True)

        if len(discrepancies) > 0:
            logger.warning(f"Found {len(discrepancies)} orders with total price discrepancies")
        else:
            logger.info("All order totals match their line items")

        return discrepancies[columns]
    except Exception as e:
        logger.error(f"Error verifying order totals: {str(e)}")
        logger.error(traceback.format_exc())
        raise
