"""
FastAPI application for the JalSuraksha surveillance dashboard.

Routes only translate between HTTP and the store: payloads go to the
repositories unparsed (the validation boundary runs there), missing records
become 404s and validation failures become 400s.
"""

import logging
import threading
import time
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import Body, Depends, FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jalsuraksha import __version__
from jalsuraksha.config import Settings
from jalsuraksha.exceptions import FieldError, StoreError, ValidationFailure
from jalsuraksha.schemas import (
    AlertRecord,
    AlertStatistics,
    CaseTrendPoint,
    DashboardSummary,
    DiseaseReportRecord,
    PHCRecord,
    PHCStatistics,
    UserRecord,
    WaterQualityTestRecord,
)
from jalsuraksha.services.validation import validate_date_range, validate_days
from jalsuraksha.store import SurveillanceStore


logger = logging.getLogger("jalsuraksha.api")


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def not_found(entity: str) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": f"{entity} not found"})


def get_store(request: Request) -> SurveillanceStore:
    """Dependency returning the application's store, building it on first use."""
    state = request.app.state
    if state.store is None:
        with state.store_lock:
            if state.store is None:
                state.store = SurveillanceStore.from_settings(state.settings)
    return state.store


def create_app(store: Optional[SurveillanceStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="JalSuraksha Surveillance API",
        description="Disease reports, water-quality tests and outbreak alerts for primary health centers",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.store = store
    app.state.store_lock = threading.Lock()

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_api_requests(request: Request, call_next):
        start = time.perf_counter()
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            if request.url.path.startswith("/api"):
                duration_ms = (time.perf_counter() - start) * 1000
                logger.info(f"{request.method} {request.url.path} {status_code} in {duration_ms:.0f}ms")

    @app.exception_handler(ValidationFailure)
    async def validation_failure_handler(request: Request, exc: ValidationFailure):
        return JSONResponse(status_code=400, content={"error": "Validation failed", "details": exc.details()})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = [
            FieldError(".".join(str(part) for part in e["loc"]), e["msg"]).to_dict()
            for e in exc.errors()
        ]
        return JSONResponse(status_code=400, content={"error": "Validation failed", "details": details})

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.error(f"API error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": "JalSuraksha Surveillance API",
            "version": __version__,
            "docs": "/docs",
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    # PHC endpoints
    @app.get("/api/phcs", response_model=List[PHCRecord])
    def list_phcs(state: Optional[str] = None, district: Optional[str] = None,
                  store: SurveillanceStore = Depends(get_store)):
        """Get PHCs, optionally filtered by state or district."""
        if state:
            return store.phcs.list_by_state(state)
        if district:
            return store.phcs.list_by_district(district)
        return store.phcs.list()

    @app.get("/api/phcs/{phc_id}", response_model=PHCRecord)
    def get_phc(phc_id: str, store: SurveillanceStore = Depends(get_store)):
        phc = store.phcs.get(phc_id)
        return phc if phc is not None else not_found("PHC")

    @app.get("/api/phcs/{phc_id}/statistics", response_model=PHCStatistics)
    def get_phc_statistics(phc_id: str, store: SurveillanceStore = Depends(get_store)):
        stats = store.data_service.phc_statistics(phc_id)
        return stats if stats is not None else not_found("PHC")

    @app.post("/api/phcs", response_model=PHCRecord, status_code=status.HTTP_201_CREATED)
    def create_phc(payload: Dict[str, Any] = Body(...), store: SurveillanceStore = Depends(get_store)):
        return store.phcs.create(payload)

    @app.patch("/api/phcs/{phc_id}", response_model=PHCRecord)
    def update_phc(phc_id: str, payload: Dict[str, Any] = Body(...),
                   store: SurveillanceStore = Depends(get_store)):
        phc = store.phcs.update(phc_id, payload)
        return phc if phc is not None else not_found("PHC")

    @app.delete("/api/phcs/{phc_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_phc(phc_id: str, store: SurveillanceStore = Depends(get_store)):
        if not store.phcs.delete(phc_id):
            return not_found("PHC")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    # Disease report endpoints
    @app.get("/api/disease-reports", response_model=List[DiseaseReportRecord])
    def list_disease_reports(phcId: Optional[str] = None, days: Optional[str] = None,
                             startDate: Optional[str] = None, endDate: Optional[str] = None,
                             store: SurveillanceStore = Depends(get_store)):
        """Reports for a PHC, within a date range, or from the last N days (default 7)."""
        if phcId:
            return store.disease_reports.list_by_phc(phcId)
        if startDate and endDate:
            return store.disease_reports.list_by_date_range(*validate_date_range(startDate, endDate))
        return store.disease_reports.list_recent(validate_days(days) if days else 7)

    @app.get("/api/disease-reports/{report_id}", response_model=DiseaseReportRecord)
    def get_disease_report(report_id: str, store: SurveillanceStore = Depends(get_store)):
        report = store.disease_reports.get(report_id)
        return report if report is not None else not_found("Disease report")

    @app.post("/api/disease-reports", response_model=DiseaseReportRecord, status_code=status.HTTP_201_CREATED)
    def create_disease_report(payload: Dict[str, Any] = Body(...), store: SurveillanceStore = Depends(get_store)):
        return store.disease_reports.create(payload)

    @app.patch("/api/disease-reports/{report_id}", response_model=DiseaseReportRecord)
    def update_disease_report(report_id: str, payload: Dict[str, Any] = Body(...),
                              store: SurveillanceStore = Depends(get_store)):
        report = store.disease_reports.update(report_id, payload)
        return report if report is not None else not_found("Disease report")

    @app.delete("/api/disease-reports/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_disease_report(report_id: str, store: SurveillanceStore = Depends(get_store)):
        if not store.disease_reports.delete(report_id):
            return not_found("Disease report")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    # Water quality test endpoints
    @app.get("/api/water-quality-tests", response_model=List[WaterQualityTestRecord])
    def list_water_quality_tests(phcId: Optional[str] = None, days: Optional[str] = None,
                                 startDate: Optional[str] = None, endDate: Optional[str] = None,
                                 store: SurveillanceStore = Depends(get_store)):
        """Tests for a PHC, within a date range, or from the last N days (default 7)."""
        if phcId:
            return store.water_tests.list_by_phc(phcId)
        if startDate and endDate:
            return store.water_tests.list_by_date_range(*validate_date_range(startDate, endDate))
        return store.water_tests.list_recent(validate_days(days) if days else 7)

    @app.get("/api/water-quality-tests/{test_id}", response_model=WaterQualityTestRecord)
    def get_water_quality_test(test_id: str, store: SurveillanceStore = Depends(get_store)):
        test = store.water_tests.get(test_id)
        return test if test is not None else not_found("Water quality test")

    @app.post("/api/water-quality-tests", response_model=WaterQualityTestRecord,
              status_code=status.HTTP_201_CREATED)
    def create_water_quality_test(payload: Dict[str, Any] = Body(...),
                                  store: SurveillanceStore = Depends(get_store)):
        return store.water_tests.create(payload)

    @app.patch("/api/water-quality-tests/{test_id}", response_model=WaterQualityTestRecord)
    def update_water_quality_test(test_id: str, payload: Dict[str, Any] = Body(...),
                                  store: SurveillanceStore = Depends(get_store)):
        test = store.water_tests.update(test_id, payload)
        return test if test is not None else not_found("Water quality test")

    @app.delete("/api/water-quality-tests/{test_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_water_quality_test(test_id: str, store: SurveillanceStore = Depends(get_store)):
        if not store.water_tests.delete(test_id):
            return not_found("Water quality test")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    # Alert endpoints
    @app.get("/api/alerts", response_model=List[AlertRecord])
    def list_alerts(phcId: Optional[str] = None, status: Optional[str] = None,
                    severity: Optional[str] = None, days: Optional[str] = None,
                    store: SurveillanceStore = Depends(get_store)):
        """Alerts by PHC, status or severity, else from the last N days (default 7)."""
        if phcId:
            return store.alerts.list_by_phc(phcId)
        if status:
            return store.alerts.list_by_status(status)
        if severity:
            return store.alerts.list_by_severity(severity)
        return store.alerts.list_recent(validate_days(days) if days is not None else 7)

    @app.get("/api/alerts/active", response_model=List[AlertRecord])
    def list_active_alerts(store: SurveillanceStore = Depends(get_store)):
        return store.alerts.list_active()

    @app.get("/api/alerts/statistics", response_model=AlertStatistics)
    def get_alert_statistics(store: SurveillanceStore = Depends(get_store)):
        return store.alert_service.alert_statistics()

    @app.get("/api/alerts/{alert_id}", response_model=AlertRecord)
    def get_alert(alert_id: str, store: SurveillanceStore = Depends(get_store)):
        alert = store.alerts.get(alert_id)
        return alert if alert is not None else not_found("Alert")

    @app.post("/api/alerts", response_model=AlertRecord, status_code=status.HTTP_201_CREATED)
    def create_alert(payload: Dict[str, Any] = Body(...), store: SurveillanceStore = Depends(get_store)):
        return store.alerts.create(payload)

    @app.patch("/api/alerts/{alert_id}", response_model=AlertRecord)
    def update_alert(alert_id: str, payload: Dict[str, Any] = Body(...),
                     store: SurveillanceStore = Depends(get_store)):
        alert = store.alerts.update(alert_id, payload)
        return alert if alert is not None else not_found("Alert")

    @app.post("/api/alerts/{alert_id}/verify", response_model=AlertRecord)
    def verify_alert(alert_id: str, payload: Optional[Dict[str, Any]] = Body(None),
                     store: SurveillanceStore = Depends(get_store)):
        payload = payload or {}
        alert = store.alert_service.verify(alert_id, payload.get("verifiedBy", payload.get("verified_by")))
        return alert if alert is not None else not_found("Alert")

    @app.post("/api/alerts/{alert_id}/resolve", response_model=AlertRecord)
    def resolve_alert(alert_id: str, payload: Optional[Dict[str, Any]] = Body(None),
                      store: SurveillanceStore = Depends(get_store)):
        payload = payload or {}
        alert = store.alert_service.resolve(alert_id, payload.get("resolvedBy", payload.get("resolved_by")))
        return alert if alert is not None else not_found("Alert")

    @app.delete("/api/alerts/{alert_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_alert(alert_id: str, store: SurveillanceStore = Depends(get_store)):
        if not store.alerts.delete(alert_id):
            return not_found("Alert")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    # User endpoints
    @app.get("/api/users", response_model=UserRecord)
    def find_user(email: Optional[str] = None, store: SurveillanceStore = Depends(get_store)):
        """Look a user up by exact email."""
        if not email:
            return JSONResponse(status_code=400, content={"error": "Email query parameter required"})
        user = store.users.get_by_email(email)
        return user if user is not None else not_found("User")

    @app.get("/api/users/{user_id}", response_model=UserRecord)
    def get_user(user_id: str, store: SurveillanceStore = Depends(get_store)):
        user = store.users.get(user_id)
        return user if user is not None else not_found("User")

    @app.post("/api/users", response_model=UserRecord, status_code=status.HTTP_201_CREATED)
    def create_user(payload: Dict[str, Any] = Body(...), store: SurveillanceStore = Depends(get_store)):
        return store.users.create(payload)

    @app.patch("/api/users/{user_id}", response_model=UserRecord)
    def update_user(user_id: str, payload: Dict[str, Any] = Body(...),
                    store: SurveillanceStore = Depends(get_store)):
        user = store.users.update(user_id, payload)
        return user if user is not None else not_found("User")

    @app.delete("/api/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_user(user_id: str, store: SurveillanceStore = Depends(get_store)):
        if not store.users.delete(user_id):
            return not_found("User")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    # Dashboard endpoints
    @app.get("/api/dashboard/summary", response_model=DashboardSummary)
    def get_dashboard_summary(store: SurveillanceStore = Depends(get_store)):
        """Get dashboard summary statistics."""
        return store.data_service.dashboard_summary()

    @app.get("/api/dashboard/trends", response_model=List[CaseTrendPoint])
    def get_case_trend(days: Optional[str] = None, phcId: Optional[str] = None,
                       diseaseType: Optional[str] = None,
                       store: SurveillanceStore = Depends(get_store)):
        """Daily case totals for the trend chart (default 30 days)."""
        window = validate_days(days) if days is not None else 30
        return store.data_service.case_trend(window, phc_id=phcId, disease_type=diseaseType)

    return app


app = create_app()


def run():
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run("jalsuraksha.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
