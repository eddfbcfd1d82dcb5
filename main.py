import logging
import os
from typing import Any, Dict, List

from fastapi import Body, Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from config import Settings, load_settings
from database import CorruptStorage, JsonRecordStore
from exporter import to_csv
from schemas import (
    MessageResponse,
    OrderResponse,
    ReservationResponse,
    SignupRequest,
    SignupResponse,
    UpdateMenuRequest,
)
from services import (
    CustomerService,
    DuplicateEmail,
    InvalidMenu,
    MenuService,
    OrderService,
    ReservationService,
    SubmissionService,
    Unauthorized,
)

settings = load_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="The Mom Chef API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_store = JsonRecordStore(settings.data_dir)


def get_settings() -> Settings:
    return settings


def get_store() -> JsonRecordStore:
    return _store


def get_menu_service(
    store: JsonRecordStore = Depends(get_store), cfg: Settings = Depends(get_settings)
) -> MenuService:
    return MenuService(store, cfg.admin_password)


def get_customer_service(store: JsonRecordStore = Depends(get_store)) -> CustomerService:
    return CustomerService(store)


def get_order_service(store: JsonRecordStore = Depends(get_store)) -> OrderService:
    return OrderService(store)


def get_reservation_service(store: JsonRecordStore = Depends(get_store)) -> ReservationService:
    return ReservationService(store)


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


@app.get("/")
def root():
    return {"service": "The Mom Chef API", "status": "ok"}


@app.get("/api/menu")
def get_menu(menu: MenuService = Depends(get_menu_service)):
    try:
        return menu.get_all()
    except Exception:
        logger.exception("Error reading menu file")
        return _message(500, "Error loading menu")


@app.post("/api/signup", status_code=201, response_model=SignupResponse)
def signup(payload: SignupRequest, customers: CustomerService = Depends(get_customer_service)):
    try:
        customer = customers.sign_up(payload.model_dump())
    except DuplicateEmail:
        return _message(400, "A customer with this email already exists.")
    except Exception:
        logger.exception("Error during signup")
        return _message(500, "Failed to register customer.")
    return SignupResponse(message="Customer registered successfully!", customer=customer)


@app.post("/api/orders", status_code=201, response_model=OrderResponse)
def create_order(
    payload: Dict[str, Any] = Body(...), orders: OrderService = Depends(get_order_service)
):
    try:
        order = orders.submit(payload)
    except Exception:
        logger.exception("Error saving order")
        return _message(500, "Failed to save order")
    return {"message": "Order received!", "order": order}


@app.post("/api/reservations", status_code=201, response_model=ReservationResponse)
def create_reservation(
    payload: Dict[str, Any] = Body(...),
    reservations: ReservationService = Depends(get_reservation_service),
):
    try:
        reservation = reservations.submit(payload)
    except Exception:
        logger.exception("Error saving reservation")
        return _message(500, "Failed to save reservation")
    return {"message": "Reservation received!", "reservation": reservation}


@app.post("/api/update-menu", response_model=MessageResponse)
def update_menu(payload: UpdateMenuRequest, menu: MenuService = Depends(get_menu_service)):
    try:
        menu.replace_all(payload.menu, payload.password)
    except Unauthorized:
        return _message(401, "Unauthorized")
    except InvalidMenu:
        return _message(400, "Menu must be a list of items.")
    except Exception:
        logger.exception("Error updating menu")
        return _message(500, "Failed to update menu")
    return MessageResponse(message="Menu updated successfully!")


@app.get("/api/customers")
def list_customers(customers: CustomerService = Depends(get_customer_service)):
    try:
        return customers.get_all()
    except Exception:
        logger.exception("Error reading customers file")
        return _message(500, "Error loading customers")


# --- Data export ---

def _export(service: SubmissionService | CustomerService, name: str) -> Response:
    try:
        records: List[Any] = service.get_all()
        if not records:
            return PlainTextResponse(f"No {name} to export.")
        csv_text = to_csv(records)
    except Exception:
        logger.exception("Error exporting %s", name)
        return _message(500, f"Failed to export {name}.")
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{name}.csv"'},
    )


@app.get("/api/export-orders")
def export_orders(orders: OrderService = Depends(get_order_service)):
    return _export(orders, "orders")


@app.get("/api/export-reservations")
def export_reservations(reservations: ReservationService = Depends(get_reservation_service)):
    return _export(reservations, "reservations")


@app.get("/api/export-customers")
def export_customers(customers: CustomerService = Depends(get_customer_service)):
    return _export(customers, "customers")


@app.get("/test")
def test_storage(store: JsonRecordStore = Depends(get_store), cfg: Settings = Depends(get_settings)):
    response = {
        "backend": "✅ Running",
        "storage": "❌ Not Available",
        "data_dir": store.data_dir,
        "admin_password": "✅ Set" if cfg.admin_password else "❌ Not Set",
        "collections": [],
        "corrupt": [],
    }
    try:
        if not os.path.isdir(store.data_dir):
            response["storage"] = "⚠️  Not initialized"
            return response
        collections = store.collections()
        response["collections"] = collections
        for name in collections:
            try:
                store.load(name)
            except CorruptStorage:
                response["corrupt"].append(name)
        if response["corrupt"]:
            response["storage"] = "⚠️  Available but corrupt collections found"
        else:
            response["storage"] = "✅ Available"
    except Exception:
        logger.exception("Storage health check failed")
        response["storage"] = "❌ Error"
    return response


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
