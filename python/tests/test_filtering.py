"""
Tests for filtered, paginated search.

Exercises criteria matching, inclusive ranges, sorting, paging and the
rejection of malformed requests against a small address table.
"""

import uuid

import pytest
from pydantic import ValidationError

from api.models import AddressDTO
from database.filtering import (
    EntityFilter,
    FilterRequest,
    PaginationRequest,
    PaginationResponse,
    SortDirection,
    build_filter_model,
    create_filter,
    filterable_fields,
)
from database.mappers import EntityMapper
from database.models import Address, AddressKind
from database.repositories import InvalidFilterError

AddressFilter = build_filter_model(Address, AddressDTO)
AddressFilterRequest = FilterRequest[AddressFilter]


@pytest.fixture
def party_id(make_party):
    return make_party()


@pytest.fixture
def addresses(session, party_id):
    """Five addresses with distinct cities, kinds and latitudes."""
    rows = [
        ("London", AddressKind.HOME, 51.5),
        ("Londonderry", AddressKind.WORK, 55.0),
        ("Paris", AddressKind.HOME, 48.8),
        ("Madrid", AddressKind.MAILING, 40.4),
        ("Lisbon", AddressKind.REGISTERED, 38.7),
    ]
    created = []
    for city, kind, latitude in rows:
        address = Address(
            party_id=party_id,
            address_kind=kind,
            line1=f"1 {city} Road",
            city=city,
            country_id=uuid.uuid4(),
            latitude=latitude,
        )
        session.add(address)
        created.append(address)
    session.commit()
    return created


@pytest.fixture
def address_filter(session):
    """Filter over addresses mapping rows to AddressDTO."""
    mapper = EntityMapper(Address, AddressDTO)
    return create_filter(Address, mapper.to_dto, session, dto=AddressDTO)


def make_request(**data) -> FilterRequest:
    return AddressFilterRequest.model_validate(data)


# ============================================
# REQUEST MODEL TESTS
# ============================================

class TestFilterRequestModel:
    """Tests for request parsing."""

    def test_defaults(self):
        request = make_request()

        assert request.filters is None
        assert request.range_filters == {}
        assert request.pagination.page_number == 0
        assert request.pagination.page_size == 10
        assert request.pagination.sort_direction == SortDirection.DESC

    def test_camel_case_keys(self):
        request = make_request(
            filters={"addressKind": "HOME", "postalCode": "EC1"},
            rangeFilters={"latitude": {"from": 10, "to": 20}},
            pagination={"pageNumber": 2, "pageSize": 5, "sortBy": "city", "sortDirection": "ASC"},
        )

        assert request.filters.address_kind == AddressKind.HOME
        assert request.filters.postal_code == "EC1"
        assert request.range_filters["latitude"].from_ == 10
        assert request.pagination.page_number == 2
        assert request.pagination.sort_direction == SortDirection.ASC

    def test_unknown_filter_key_rejected(self):
        with pytest.raises(ValidationError):
            make_request(filters={"shoeSize": 42})

    def test_filter_value_type_checked(self):
        with pytest.raises(ValidationError):
            make_request(filters={"addressKind": "CASTLE"})

    @pytest.mark.parametrize("pagination", [
        {"pageNumber": -1},
        {"pageSize": 0},
        {"pageSize": 501},
        {"sortDirection": "SIDEWAYS"},
    ])
    def test_invalid_pagination_rejected(self, pagination):
        with pytest.raises(ValidationError):
            make_request(pagination=pagination)

    def test_filter_model_drops_input_constraints(self):
        """A filter on a constrained field accepts fragments."""
        request = make_request(filters={"city": "o"})
        assert request.filters.city == "o"

    def test_filterable_fields_follow_columns(self):
        fields = filterable_fields(Address, AddressDTO)

        assert fields["city"] is str
        assert fields["latitude"] is float
        assert fields["address_kind"] is AddressKind
        assert fields["country_id"] is uuid.UUID


# ============================================
# EXECUTION TESTS
# ============================================

class TestEntityFilter:
    """Tests for running filters against the database."""

    def test_no_criteria_returns_everything(self, address_filter, addresses):
        page = address_filter.filter(make_request())

        assert isinstance(page, PaginationResponse)
        assert page.total_elements == 5
        assert page.total_pages == 1
        assert page.current_page == 0
        assert all(isinstance(item, AddressDTO) for item in page.content)

    def test_string_filter_is_case_insensitive_substring(self, address_filter, addresses):
        page = address_filter.filter(make_request(filters={"city": "LONDON"}))

        assert page.total_elements == 2
        assert {a.city for a in page.content} == {"London", "Londonderry"}

    def test_like_wildcards_are_literal(self, address_filter, addresses):
        page = address_filter.filter(make_request(filters={"city": "%"}))
        assert page.total_elements == 0

    def test_enum_filter_is_exact(self, address_filter, addresses):
        page = address_filter.filter(make_request(filters={"addressKind": "HOME"}))

        assert page.total_elements == 2
        assert {a.city for a in page.content} == {"London", "Paris"}

    def test_criteria_are_combined(self, address_filter, addresses):
        page = address_filter.filter(make_request(filters={"city": "lon", "addressKind": "WORK"}))

        assert [a.city for a in page.content] == ["Londonderry"]

    def test_uuid_filter(self, address_filter, addresses, party_id):
        page = address_filter.filter(make_request(filters={"partyId": str(party_id)}))
        assert page.total_elements == 5

        page = address_filter.filter(make_request(filters={"partyId": str(uuid.uuid4())}))
        assert page.total_elements == 0
        assert page.total_pages == 0
        assert page.content == []

    def test_range_is_inclusive(self, address_filter, addresses):
        page = address_filter.filter(make_request(rangeFilters={"latitude": {"from": 40.4, "to": 51.5}}))

        assert {a.city for a in page.content} == {"London", "Paris", "Madrid"}

    def test_open_ended_range(self, address_filter, addresses):
        page = address_filter.filter(make_request(rangeFilters={"latitude": {"from": 50}}))
        assert {a.city for a in page.content} == {"London", "Londonderry"}

        page = address_filter.filter(make_request(rangeFilters={"latitude": {"to": 40}}))
        assert [a.city for a in page.content] == ["Lisbon"]

    def test_range_value_coerced_to_column_type(self, address_filter, addresses):
        page = address_filter.filter(make_request(rangeFilters={"latitude": {"from": "55"}}))
        assert [a.city for a in page.content] == ["Londonderry"]

    def test_sort_ascending(self, address_filter, addresses):
        page = address_filter.filter(make_request(pagination={"sortBy": "city", "sortDirection": "ASC"}))

        assert [a.city for a in page.content] == ["Lisbon", "London", "Londonderry", "Madrid", "Paris"]

    def test_sort_defaults_to_descending(self, address_filter, addresses):
        page = address_filter.filter(make_request(pagination={"sortBy": "latitude"}))

        assert [a.city for a in page.content] == ["Londonderry", "London", "Paris", "Madrid", "Lisbon"]

    def test_paging(self, address_filter, addresses):
        request = make_request(pagination={"pageNumber": 1, "pageSize": 2, "sortBy": "city", "sortDirection": "ASC"})

        page = address_filter.filter(request)

        assert page.total_elements == 5
        assert page.total_pages == 3
        assert page.current_page == 1
        assert [a.city for a in page.content] == ["Londonderry", "Madrid"]

    def test_page_past_the_end(self, address_filter, addresses):
        page = address_filter.filter(make_request(pagination={"pageNumber": 9, "pageSize": 2}))

        assert page.total_elements == 5
        assert page.content == []

    def test_response_uses_camel_case(self, address_filter, addresses):
        page = address_filter.filter(make_request(pagination={"pageSize": 1}))

        data = page.model_dump(by_alias=True, mode="json")

        assert set(data) == {"content", "totalElements", "totalPages", "currentPage"}
        assert "addressId" in data["content"][0]

    def test_unknown_sort_field(self, address_filter, addresses):
        with pytest.raises(InvalidFilterError, match="Unknown sort field 'shoeSize'"):
            address_filter.filter(make_request(pagination={"sortBy": "shoeSize"}))

    def test_unknown_range_field(self, address_filter, addresses):
        with pytest.raises(InvalidFilterError) as exc_info:
            address_filter.filter(make_request(rangeFilters={"altitude": {"from": 1}}))

        assert exc_info.value.error_code == "INVALID_FILTER"

    def test_uncoercible_range_value(self, address_filter, addresses):
        with pytest.raises(InvalidFilterError, match="latitude"):
            address_filter.filter(make_request(rangeFilters={"latitude": {"from": "north"}}))

    def test_filter_without_dto(self, session, addresses):
        """Without a DTO every column is filterable and rows map through the callable."""
        entity_filter = EntityFilter(Address, lambda row: AddressDTO.model_validate(row), session)

        page = entity_filter.filter(FilterRequest(pagination=PaginationRequest(page_size=3)))

        assert page.total_elements == 5
        assert len(page.content) == 3
