from flask import Blueprint, render_template, request

from app.prospects.constants import GOOD_FIT_OPTIONS, REFERRAL_TYPES, TABS, TEMPERATURES
from app.prospects.db import db_session
from app.prospects.modules.contacts.controller import DashboardController
from app.prospects.modules.contacts.filters import FilterContext
from app.prospects.modules.preferences.service import get_preferences

bp = Blueprint("routes", __name__)


@bp.get("/")
def index():
    """Dashboard: one fetch of the whole collection, tabs and filters applied in memory."""
    s = db_session()
    ctrl = DashboardController(s)
    ctrl.fetch_all()
    ctx = FilterContext.from_args(request.args)
    contacts = ctrl.filtered(ctx)
    return render_template(
        "public/index.html",
        contacts=contacts,
        counts=ctrl.counts(),
        ctx=ctx,
        tabs=TABS,
        temperatures=TEMPERATURES,
        referral_types=REFERRAL_TYPES,
        good_fit_options=GOOD_FIT_OPTIONS,
        prefs=get_preferences(s),
        notifications=ctrl.notifications,
    )


@bp.get("/health")
def health():
    """Health check endpoint. Returns JSON."""
    return {"ok": True}


@bp.get("/healthz")
def healthz():
    """
    Fast health check for container probes. No DB access, minimal overhead.
    """
    return "ok", 200
