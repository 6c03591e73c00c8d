"""Tests for Pydantic schemas."""

import base64
import math

import pytest
from pydantic import ValidationError

from terramine.engine.grid import CellId, cell_for_id
from terramine.engine.mines import MineType
from terramine.models import Property
from terramine.schemas.accounts import PositionReport, ProfileUpdate
from terramine.schemas.cells import CellResponse, PurchaseRequest
from terramine.schemas.check_ins import CheckInRequest


class TestPositionSchemas:
    """Tests for coordinate validation in request bodies."""

    def test_position_valid(self):
        report = PositionReport(latitude=42.0, longitude=-71.0)
        assert report.latitude == 42.0

    @pytest.mark.parametrize("lat,lon", [(91, 0), (0, -181), (math.nan, 0), (0, math.inf)])
    def test_position_invalid(self, lat, lon):
        with pytest.raises(ValidationError):
            PositionReport(latitude=lat, longitude=lon)

    def test_purchase_request_coordinates_optional(self):
        request = PurchaseRequest()
        assert request.cell_id is None
        assert request.latitude is None

    def test_purchase_request_rejects_out_of_range(self):
        with pytest.raises(ValidationError):
            PurchaseRequest(cell_id="1_1", latitude=-95.0, longitude=0.0)


class TestCheckInRequest:
    """Tests for the check-in body."""

    def test_photo_decoded(self):
        payload = b"\xff\xd8\xffdata"
        request = CheckInRequest(photo_base64=base64.b64encode(payload).decode())
        assert request.photo_bytes() == payload

    def test_no_photo(self):
        assert CheckInRequest().photo_bytes() is None
        assert CheckInRequest(photo_base64="").photo_bytes() is None

    def test_invalid_base64_rejected(self):
        with pytest.raises(ValidationError, match="base64"):
            CheckInRequest(photo_base64="not base64!!")

    def test_message_length_limited(self):
        with pytest.raises(ValidationError):
            CheckInRequest(message="x" * 501)


class TestProfileUpdate:
    """Tests for partial profile updates."""

    def test_only_set_fields_dumped(self):
        update = ProfileUpdate(nickname="Digger")
        assert update.model_dump(exclude_unset=True) == {"nickname": "Digger"}


class TestCellResponse:
    """Tests for cell serialization."""

    def test_unowned_cell(self):
        response = CellResponse.from_cell(cell_for_id(CellId(1, 2)))
        assert response.id == "1_2"
        assert not response.is_owned
        assert response.owner_id is None
        assert len(response.corners) == 4
        assert response.center.latitude == pytest.approx(0.00015)

    def test_owned_cell(self):
        prop = Property(
            id="1_2",
            grid_x=1,
            grid_y=2,
            owner_id="alice",
            mine_type=MineType.GOLD,
            center_lat=0.00015,
            center_lng=0.00025,
            nickname="Home",
        )
        response = CellResponse.from_cell(cell_for_id(CellId(1, 2)), prop)
        assert response.is_owned
        assert response.owner_id == "alice"
        assert response.mine_type == MineType.GOLD
        assert response.nickname == "Home"
