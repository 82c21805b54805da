import argparse
import time
import schedule
import logging
import sys
from database.config import SessionLocal
from config.app_config import RECONCILE_INTERVAL_MINUTES
from services.reconciliation import PostStatusReconciler

# Configure Logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler("reconciliation_worker.log")
    ]
)

def run_reconciliation_cycle():
    logging.info("Starting post status reconciliation cycle...")
    db = SessionLocal()
    try:
        repaired = PostStatusReconciler(db).run()
        logging.info(f"Cycle Complete. {len(repaired)} post(s) updated.")
    except Exception:
        logging.exception("Error in reconciliation cycle")
    finally:
        db.close()

def start_scheduler():
    logging.info(f"Starting Reconciliation Scheduler (Every {RECONCILE_INTERVAL_MINUTES} Minutes)...")
    # Run once immediately
    run_reconciliation_cycle()

    schedule.every(RECONCILE_INTERVAL_MINUTES).minutes.do(run_reconciliation_cycle)

    while True:
        schedule.run_pending()
        time.sleep(60)

def main():
    parser = argparse.ArgumentParser(description="MonHubImmo post status reconciliation worker")
    parser.add_argument("--mode", choices=["once", "schedule"], default="schedule", help="Run once or schedule")
    args = parser.parse_args()

    if args.mode == "schedule":
        start_scheduler()
    else:
        run_reconciliation_cycle()

if __name__ == "__main__":
    main()
