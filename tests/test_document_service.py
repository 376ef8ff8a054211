import pytest

from conftest import ADMIN, OTHER_TECH_USER, PROC_USER, TECH_USER
from tenderflow.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from tenderflow.core.security import Principal
from tenderflow.models.bidding import TenderLineItem
from tenderflow.models.enums import ProcessingStatus, Role
from tenderflow.schemas.bidding import BiddingConfigIn, LineItemUpdate
from tenderflow.schemas.documents import DocumentUpdate
from tenderflow.services import document_service
from tenderflow.services.comparison_service import rank


async def run(session_factory, operation, *args, **kwargs):
    async with session_factory() as db:
        return await operation(db, *args, **kwargs)


def line_items():
    return [
        TenderLineItem(position=0, name="Asphalt", unit="t", quantity=100, estimated_price=80, total_price=8000),
        TenderLineItem(position=1, name="Road marking", unit="m", quantity=500, estimated_price=4, total_price=2000),
    ]


async def test_list_is_paginated_newest_first(session_factory, make_document):
    first = await make_document(title="First")
    second = await make_document(title="Second")
    third = await make_document(title="Third")

    page_one = await run(session_factory, document_service.list_documents, ADMIN, page=1, limit=2)
    page_two = await run(session_factory, document_service.list_documents, ADMIN, page=2, limit=2)

    assert [document.id for document in page_one.documents] == [third.id, second.id]
    assert [document.id for document in page_two.documents] == [first.id]
    assert page_one.pagination.total == 3
    assert page_one.pagination.total_pages == 2
    assert page_two.pagination.page == 2


async def test_list_filters_by_status_and_type(session_factory, make_document):
    rfp = await make_document(document_type="RFP", status=ProcessingStatus.COMPLETED.value)
    await make_document(document_type="RFQ", status=ProcessingStatus.COMPLETED.value)
    await make_document(document_type="RFP", status=ProcessingStatus.PENDING.value)

    listing = await run(session_factory, document_service.list_documents, ADMIN,
                        status="COMPLETED", document_type="RFP")

    assert [document.id for document in listing.documents] == [rfp.id]
    assert listing.pagination.total == 1


async def test_evaluators_only_list_documents_they_may_work_on(session_factory, make_document):
    uploaded = await make_document(uploaded_by=TECH_USER.id, assignee_tech_id=OTHER_TECH_USER.id)
    assigned = await make_document(uploaded_by=ADMIN.id, assignee_tech_id=TECH_USER.id)
    no_tech_assignee = await make_document(uploaded_by=ADMIN.id, assignee_proc_id="proc-2")
    await make_document(uploaded_by=ADMIN.id, assignee_tech_id=OTHER_TECH_USER.id)

    technical = await run(session_factory, document_service.list_documents, TECH_USER)
    procurement = await run(session_factory, document_service.list_documents, PROC_USER)
    admin = await run(session_factory, document_service.list_documents, ADMIN)

    assert {document.id for document in technical.documents} == {uploaded.id, assigned.id, no_tech_assignee.id}
    assert technical.pagination.total == 3
    assert no_tech_assignee.id not in {document.id for document in procurement.documents}
    assert procurement.pagination.total == 3
    assert admin.pagination.total == 4


@pytest.mark.parametrize("page, limit", [(0, 20), (1, 0), (1, 101)])
async def test_list_rejects_bad_paging(session_factory, page, limit):
    with pytest.raises(ValidationError):
        await run(session_factory, document_service.list_documents, ADMIN, page=page, limit=limit)


async def test_rename_document(session_factory, tech_document, reload):
    renamed = await run(session_factory, document_service.update_document, tech_document.id,
                        DocumentUpdate(title="Bridge repair"), TECH_USER, expected_version=tech_document.version)

    assert renamed.title == "Bridge repair"
    stored = await reload(tech_document.id)
    assert stored.title == "Bridge repair"
    assert stored.version == tech_document.version + 1

    with pytest.raises(ConflictError):
        await run(session_factory, document_service.update_document, tech_document.id,
                  DocumentUpdate(title="Stale"), TECH_USER, expected_version=tech_document.version)


async def test_rename_needs_access_to_the_document(session_factory, tech_document, reload):
    with pytest.raises(ForbiddenError):
        await run(session_factory, document_service.update_document, tech_document.id,
                  DocumentUpdate(title="Not mine"), OTHER_TECH_USER)

    with pytest.raises(NotFoundError):
        await run(session_factory, document_service.update_document, "missing", DocumentUpdate(title="x"), ADMIN)
    assert (await reload(tech_document.id)).title == tech_document.title


def test_title_must_not_be_empty():
    with pytest.raises(ValueError):
        DocumentUpdate(title="")


async def test_line_item_edit_is_marked_manual(session_factory, make_document, reload):
    document = await make_document(line_items=line_items())
    item_id = document.line_items[0].id

    item = await run(session_factory, document_service.update_line_item, document.id, item_id,
                     LineItemUpdate(quantity=120, notes="measured on site"), PROC_USER)

    assert item.is_manual is True
    assert item.total_price == pytest.approx(9600)
    stored = await reload(document.id)
    assert stored.line_items[0].quantity == 120
    assert stored.line_items[0].notes == "measured on site"
    assert stored.line_items[0].name == "Asphalt"
    assert stored.line_items[1].is_manual is False
    assert stored.version == document.version + 1


async def test_line_item_edit_guards(session_factory, make_document, reload):
    document = await make_document(line_items=line_items())
    other = await make_document(line_items=line_items())
    item_id = document.line_items[0].id

    with pytest.raises(ForbiddenError):
        await run(session_factory, document_service.update_line_item, document.id, item_id,
                  LineItemUpdate(quantity=1), TECH_USER)
    with pytest.raises(NotFoundError):
        await run(session_factory, document_service.update_line_item, other.id, item_id,
                  LineItemUpdate(quantity=1), ADMIN)
    with pytest.raises(ValidationError):
        await run(session_factory, document_service.update_line_item, document.id, item_id,
                  LineItemUpdate(name=None), ADMIN)

    assert (await reload(document.id)).line_items[0].quantity == 100


async def test_bidding_config_derives_adjusted_bid(session_factory, make_document, reload):
    document = await make_document(analysis={"recommended_total": 1000.0})

    config = await run(session_factory, document_service.save_bidding_config, document.id,
                       BiddingConfigIn(risk_premium_percent=10, profit_margin_percent=5), PROC_USER)

    assert config.total_adjusted_bid == pytest.approx(1150)
    assert config.updated_by == PROC_USER.id

    await run(session_factory, document_service.save_bidding_config, document.id,
              BiddingConfigIn(risk_premium_percent=0, profit_margin_percent=0, total_adjusted_bid=990), ADMIN)

    stored = await reload(document.id)
    assert stored.bidding_config.total_adjusted_bid == pytest.approx(990)
    assert stored.bidding_config.updated_by == ADMIN.id
    assert stored.version == document.version + 2


async def test_bidding_base_falls_back_to_line_items(session_factory, make_document):
    priced = await make_document(line_items=line_items())
    bare = await make_document()

    from_items = await run(session_factory, document_service.save_bidding_config, priced.id,
                           BiddingConfigIn(profit_margin_percent=10), PROC_USER)
    without_base = await run(session_factory, document_service.save_bidding_config, bare.id,
                             BiddingConfigIn(profit_margin_percent=10), PROC_USER)

    assert from_items.total_adjusted_bid == pytest.approx(11000)
    assert without_base.total_adjusted_bid is None


async def test_bidding_config_needs_procurement(session_factory, make_document):
    document = await make_document()

    with pytest.raises(ForbiddenError):
        await run(session_factory, document_service.save_bidding_config, document.id, BiddingConfigIn(), TECH_USER)


async def test_ranking_shows_bidding_config(session_factory, make_document):
    document = await make_document(analysis={"recommended_total": 200.0})
    await run(session_factory, document_service.save_bidding_config, document.id,
              BiddingConfigIn(risk_premium_percent=50), PROC_USER)

    [entry] = await rank([document.id], session_factory=session_factory)

    assert entry.bidding_config.risk_premium_percent == pytest.approx(50)
    assert entry.bidding_config.total_adjusted_bid == pytest.approx(300)


def test_visibility_filter_is_open_for_admins():
    assert document_service.visibility_filter(ADMIN) is None
    assert document_service.visibility_filter(Principal(id="proc-9", role=Role.PROCUREMENT)) is not None
