# artisan_market/api/routers/auctions.py
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from artisan_market.api.deps import get_lock_service, get_session_factory
from artisan_market.api.errors import http_error
from artisan_market.data.database import get_db
from artisan_market.domain.errors import MarketplaceError, NotFoundError
from artisan_market.domain.schemas import AuctionCreate, AuctionOut, BidIn, MessageOut
from artisan_market.services.auction_hub import hub
from artisan_market.services.auction_service import AuctionService
from artisan_market.services.lock_service import LockService
from artisan_market.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/auctions", tags=["auctions"])
ws_router = APIRouter(tags=["auctions"])


def get_service(db: Session, lock_service: LockService):
    return AuctionService(db, lock_service)


def auction_payload(auction: Dict[str, Any]) -> Dict[str, Any]:
    """Auction dict as it goes over the socket."""
    return AuctionOut.model_validate(auction).model_dump(mode="json", by_alias=True)


@router.post("/", response_model=AuctionOut, status_code=201)
def create_auction(
    payload: AuctionCreate,
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    svc = get_service(db, lock_service)
    try:
        return svc.create_auction(payload.model_dump())
    except NotFoundError as e:
        raise http_error(e)


@router.get("/", response_model=List[AuctionOut])
def list_auctions(
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    return get_service(db, lock_service).list_auctions()


@router.get("/{auction_id}", response_model=AuctionOut)
def get_auction(
    auction_id: int,
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    svc = get_service(db, lock_service)
    try:
        return svc.get_auction(auction_id)
    except NotFoundError as e:
        raise http_error(e)


@router.post("/{auction_id}/bid", response_model=AuctionOut)
async def place_bid(
    auction_id: int,
    payload: BidIn,
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    svc = get_service(db, lock_service)
    try:
        auction = await run_in_threadpool(
            svc.place_bid, auction_id, payload.user_id, payload.user_name, payload.amount
        )
    except MarketplaceError as e:
        raise http_error(e)

    await hub.broadcast(auction_id, "auctionUpdate", auction_payload(auction))
    return auction


@router.delete("/{auction_id}", response_model=MessageOut)
def delete_auction(
    auction_id: int,
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    svc = get_service(db, lock_service)
    try:
        svc.delete_auction(auction_id)
    except NotFoundError as e:
        raise http_error(e)
    return {"message": "Auction deleted successfully"}


#realtime

def _bid_in_new_session(session_factory, lock_service: LockService, data: Dict[str, Any]) -> Dict[str, Any]:
    db = session_factory()
    try:
        return get_service(db, lock_service).place_bid(
            int(data["auctionId"]),
            int(data["userId"]),
            str(data.get("userName") or ""),
            Decimal(str(data["amount"])),
        )
    finally:
        db.close()


async def _handle_bid(websocket: WebSocket, data: Any, session_factory, lock_service: LockService):
    if not isinstance(data, dict):
        await hub.send(websocket, "bidError", {"error": "Invalid bid payload", "code": "BID_ERROR"})
        return

    try:
        auction = await run_in_threadpool(_bid_in_new_session, session_factory, lock_service, data)
    except MarketplaceError as e:
        await hub.send(websocket, "bidError", {"error": e.message, "code": "BID_ERROR"})
        return
    except (KeyError, TypeError, ValueError, InvalidOperation):
        await hub.send(websocket, "bidError", {"error": "Invalid bid payload", "code": "BID_ERROR"})
        return
    except Exception:
        # redis or database failure, the socket stays open for the next message
        logger.exception(f"Bid on auction {data.get('auctionId')} failed")
        await hub.send(websocket, "bidError", {"error": "Bid could not be processed", "code": "BID_ERROR"})
        return

    await hub.broadcast(auction["id"], "auctionUpdate", auction_payload(auction))


@ws_router.websocket("/ws/auctions")
async def auction_socket(
    websocket: WebSocket,
    session_factory=Depends(get_session_factory),
    lock_service: LockService = Depends(get_lock_service),
):
    """
    {event, data} messages:
    - joinAuction: data is the auction id
    - placeBid: data is {auctionId, userId, userName, amount}
    """
    await websocket.accept()
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                await hub.send(websocket, "error", {"error": "Messages must be JSON", "code": "BAD_REQUEST"})
                continue

            event = message.get("event") if isinstance(message, dict) else None
            data = message.get("data") if isinstance(message, dict) else None

            if event == "joinAuction":
                try:
                    hub.join(int(data), websocket)
                except (TypeError, ValueError):
                    await hub.send(websocket, "error", {"error": "Invalid auction id", "code": "BAD_REQUEST"})
            elif event == "placeBid":
                await _handle_bid(websocket, data, session_factory, lock_service)
            else:
                await hub.send(websocket, "error", {"error": f"Unknown event {event}", "code": "BAD_REQUEST"})
    except WebSocketDisconnect:
        logger.info("Auction socket disconnected")
    finally:
        hub.leave_all(websocket)
