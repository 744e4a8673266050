"""
Pagination helpers
"""

from flask import current_app, request


def get_page_args():
    """Read 1-based page and limit from the query string"""
    default_limit = current_app.config.get('DEFAULT_PAGE_SIZE', 10)
    max_limit = current_app.config.get('MAX_PAGE_SIZE', 100)

    page = request.args.get('page', 1, type=int) or 1
    limit = request.args.get('limit', default_limit, type=int) or default_limit

    page = max(page, 1)
    limit = min(max(limit, 1), max_limit)
    return page, limit


def paginate(query, page, limit):
    """
    Paginate a Flask-SQLAlchemy query

    Returns:
        (items, pagination dict with page, limit, total, pages)
    """
    result = query.paginate(page=page, per_page=limit, error_out=False)
    return result.items, {
        'page': page,
        'limit': limit,
        'total': result.total,
        'pages': result.pages,
    }
