from playgrounds.core.schemas import Duration, PaymentType, Slot, VenueConfig
from playgrounds.integrations.normalize import normalize_slots, normalize_venue_details


def test_slot_availability_from_status():
    assert Slot.from_api({"id": 1, "status": "booked"}).is_available is False
    assert Slot.from_api({"id": 1, "status": "open"}).is_available is True
    assert Slot.from_api({"id": 1, "available": False}).is_available is False
    assert Slot.from_api({"start": "18:00", "end": "19:00"}).display_label == "18:00 - 19:00"


def test_slot_key_falls_back_to_start_time():
    assert Slot.from_api({"id": 9}).key == "9"
    assert Slot.from_api({"start_time": "18:00"}).key == "18:00"
    assert Slot().display_label == "Slot"


def test_duration_from_api_reads_alternate_names():
    d = Duration.from_api({"id": 3, "duration_minutes": "90", "price": "20", "name": "90 min"})
    assert (d.id, d.minutes, d.base_price, d.label) == ("3", 90, 20.0, "90 min")


def test_venue_from_api_prefers_academy_profile_flags():
    venue = VenueConfig.from_api(
        {
            "id": 12,
            "name": "Court 1",
            "price": "15",
            "allow_cliq": False,
            "academy_profile": {"id": 4, "allow_cliq": True, "allow_cash_on_date": True, "cliq_name": "PG"},
            "venue_durations": [{"id": "d60", "minutes": 60}],
        }
    )
    assert venue.id == "12"
    assert venue.price_per_hour == 15.0
    assert venue.academy_profile_id == "4"
    assert venue.cliq_name == "PG"
    assert venue.allowed_payment_types() == [PaymentType.CASH, PaymentType.CASH_ON_DATE, PaymentType.CLIQ]
    assert venue.default_duration().id == "d60"


def test_venue_without_payment_methods():
    venue = VenueConfig(id="1", allow_cash=False)
    assert venue.allowed_payment_types() == []
    assert venue.default_duration() is None
    assert venue.find_duration("x") is None


def test_normalize_response_shapes():
    assert normalize_slots([{"id": 1}]) == [{"id": 1}]
    assert normalize_slots({"slots": [{"id": 1}]}) == [{"id": 1}]
    assert normalize_slots({"data": [{"id": 2}, 3]}) == [{"id": 2}]
    assert normalize_slots(None) == []
    assert normalize_venue_details({"data": {"id": 5}}) == {"id": 5}
    assert normalize_venue_details("nope") is None
