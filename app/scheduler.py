import logging
from apscheduler.schedulers.background import BackgroundScheduler
from app.core.config import settings
from app.core.database import SessionLocal
from app.services.sponsor_service import SponsorService

logger = logging.getLogger(__name__)
scheduler = BackgroundScheduler()

# ---------------------------------------------------------
# JOB: flip active sponsors whose contract has ended
# ---------------------------------------------------------
def run_sponsor_expiry():
    db = SessionLocal()
    try:
        logger.info("🔄 Scheduler: Checking for ended sponsorships...")
        count = SponsorService(db).expire_overdue()
        logger.info(f"✅ Scheduler: Marked {count} sponsor(s) as expired.")
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Scheduler Error (Sponsor Expiry): {str(e)}")
    finally:
        db.close()

# ---------------------------------------------------------
# SCHEDULER SETUP
# ---------------------------------------------------------
def start_scheduler():
    if scheduler.running:
        return

    # Expiry is display-only unless explicitly enabled
    if not settings.AUTO_EXPIRE_SPONSORS:
        logger.info("⏸️ Sponsor expiry job disabled (AUTO_EXPIRE_SPONSORS=false).")
        return

    scheduler.add_job(
        run_sponsor_expiry, "cron", hour=settings.EXPIRY_JOB_HOUR,
        id="sponsor_expiry", replace_existing=True
    )

    scheduler.start()
    logger.info("🚀 Background Scheduler Started.")


def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown()
