"""
Admin Routes

Flask routes for admin login and the analytics dashboard.
"""

from functools import wraps
from typing import Callable

from flask import Blueprint, jsonify, make_response, redirect, render_template_string, request, url_for

from mdcms.analytics.buffer import TelemetryBuffer
from mdcms.content.resolver import RevisionResolver
from .services import AdminAuthenticator, build_page_rows
from .sessions import SessionStore

SESSION_COOKIE = "session"


def create_admin_blueprint(
    sessions: SessionStore,
    authenticator: AdminAuthenticator,
    telemetry: TelemetryBuffer,
    resolver: RevisionResolver,
    login_template: str,
    dashboard_template: str,
    secure_cookies: bool = True
) -> Blueprint:
    """Create admin blueprint with routes.

    Args:
        sessions: Admin session store
        authenticator: Password checker
        telemetry: Analytics buffer providing statistics
        resolver: Revision resolver providing the document list
        login_template: HTML template for the login page
        dashboard_template: HTML template for the dashboard
        secure_cookies: Whether the session cookie is HTTPS-only

    Returns:
        Flask blueprint with admin routes
    """
    bp = Blueprint('admin', __name__, url_prefix='/admin')

    def login_required(f: Callable) -> Callable:
        """Decorator to require a live admin session."""
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not sessions.validate(request.cookies.get(SESSION_COOKIE)):
                return redirect(url_for('admin.login_page'))
            return f(*args, **kwargs)
        return decorated_function

    @bp.get("/login")
    def login_page():
        """Admin login form."""
        return render_template_string(
            login_template,
            error=bool(request.args.get("error")),
            login_enabled=authenticator.enabled
        )

    @bp.post("/login")
    def login():
        """Check the password and start a session."""
        password = request.form.get("password", "")
        if not authenticator.check_password(password):
            return redirect(url_for('admin.login_page', error=1))

        token = sessions.create()
        resp = make_response(redirect(url_for('admin.dashboard')))
        resp.set_cookie(
            SESSION_COOKIE,
            token,
            max_age=sessions.ttl_seconds,
            httponly=True,
            secure=secure_cookies,
            samesite="Lax"
        )
        return resp

    @bp.post("/logout")
    def logout():
        """End the current session."""
        sessions.revoke(request.cookies.get(SESSION_COOKIE))
        resp = make_response(redirect(url_for('admin.login_page')))
        resp.delete_cookie(SESSION_COOKIE)
        return resp

    @bp.get("")
    @login_required
    def dashboard():
        """Main admin dashboard page."""
        stats = telemetry.compute_stats()
        documents = resolver.list_all_documents()
        rows = build_page_rows(documents, stats.page_view_counts)
        return render_template_string(
            dashboard_template,
            stats=stats,
            rows=rows,
            recent_visits=stats.recent_visits[:20],
            pending=len(telemetry.pending())
        )

    @bp.get("/api/stats")
    @login_required
    def api_stats():
        """API endpoint for visit statistics."""
        return jsonify(telemetry.compute_stats().to_dict())

    @bp.get("/api/pages")
    @login_required
    def api_pages():
        """API endpoint for all documents and their revisions."""
        documents = resolver.list_all_documents()
        return jsonify({
            page: [ref.to_dict() for ref in revisions]
            for page, revisions in documents.items()
        })

    return bp
