import logging
import random
from datetime import datetime, timezone
from unittest import mock

from apps.simulator.src.core.errors import HostError
from apps.simulator.src.infra.memory_store import InMemoryStore
from apps.simulator.src.service.synthesizer import MAX_LOGIN_ATTEMPTS, OrderSynthesizer
from libs.models.orders import PAYMENT_METHOD, OrderStatus
from tests.helpers import NOW, ListIdentityPool, make_identity, scripted_random


def test_single_item_order_for_existing_customer(make_settings, make_synthesizer, store, timer):
    cfg = make_settings(min_products=1, max_products=1, create_users=False)
    # count=1, customer index 0, product index 1, status roll 30
    synth = make_synthesizer(rng=scripted_random(randints=[1, 30], choices=[0, 1]))

    result = synth.synthesize_order(cfg)

    assert result.ok
    assert result.customer_id == 100
    assert result.status is OrderStatus.COMPLETED
    assert [(li.product_id, li.quantity) for li in result.line_items] == [(2, 1)]
    assert list(store.orders) == [result.order_id]
    order = store.orders[result.order_id]
    assert order.status == "completed"
    assert order.draft.customer_id == 100
    assert result.next_fire_at == timer.next_scheduled()
    assert result.next_fire_at > NOW


def test_item_count_stays_within_bounds(make_settings, store, scheduler):
    cfg = make_settings(min_products=2, max_products=4, create_users=False)

    for seed in range(20):
        synth = OrderSynthesizer(
            catalog=store,
            directory=store,
            identities=ListIdentityPool(),
            checkout=store,
            scheduler=scheduler,
            rng=random.Random(seed),
        )
        result = synth.synthesize_order(cfg)
        assert result.ok
        assert 2 <= sum(li.quantity for li in result.line_items) <= 4


def test_duplicate_draws_merge_into_one_line(make_settings, make_synthesizer):
    cfg = make_settings(min_products=3, max_products=3, create_users=False)
    synth = make_synthesizer(rng=scripted_random(randints=[3, 50], choices=[0, 2, 2, 0]))

    result = synth.synthesize_order(cfg)

    assert [(li.product_id, li.quantity) for li in result.line_items] == [(3, 2), (1, 1)]


def test_configured_product_pool_skips_unpublished_ids(make_settings, make_synthesizer, store):
    store.products[3] = "draft"
    cfg = make_settings(min_products=5, max_products=5, create_users=False, product_pool=[2, 3, 9])
    synth = make_synthesizer()

    result = synth.synthesize_order(cfg)

    assert result.ok
    assert [(li.product_id, li.quantity) for li in result.line_items] == [(2, 5)]


def test_configured_pool_with_nothing_published(make_settings, make_synthesizer):
    cfg = make_settings(create_users=False, product_pool=[7, 8])

    result = make_synthesizer().synthesize_order(cfg)

    assert result.error == "NoProductsAvailable"


def test_empty_catalog_aborts_and_rearms(make_settings, scheduler, timer):
    store = InMemoryStore(products={1: "draft"})
    synth = OrderSynthesizer(
        catalog=store,
        directory=store,
        identities=ListIdentityPool(),
        checkout=store,
        scheduler=scheduler,
    )

    result = synth.synthesize_order(make_settings())

    assert not result.ok
    assert result.error == "NoProductsAvailable"
    assert result.stage == "resolve_products"
    assert store.orders == {}
    assert result.next_fire_at is not None
    assert timer.next_scheduled() == result.next_fire_at


def test_catalog_failure_counts_as_no_products(make_settings, make_synthesizer, store):
    with mock.patch.object(store, "list_published_products", side_effect=HostError("down", 503)):
        result = make_synthesizer().synthesize_order(make_settings())

    assert result.error == "NoProductsAvailable"
    assert result.cause == "HostError"


def test_unique_username_exhaustion(make_settings, make_synthesizer, store):
    cfg = make_settings(min_products=1, max_products=1, create_users=True)
    synth = make_synthesizer(
        rng=scripted_random(randints=[1, 1]),
        identities=[make_identity("existing")],
    )
    before = dict(store.customers)

    with mock.patch.object(store, "login_exists", wraps=store.login_exists) as login_exists:
        result = synth.synthesize_order(cfg)

    assert not result.ok
    assert result.error == "CustomerResolutionFailed"
    assert result.cause == "UserCreationExhausted"
    assert login_exists.call_count == MAX_LOGIN_ATTEMPTS
    assert store.customers == before
    assert store.orders == {}
    assert result.next_fire_at is not None


def test_login_retry_succeeds_after_collisions(make_settings, make_synthesizer, store):
    cfg = make_settings(min_products=1, max_products=1, create_users=True)
    synth = make_synthesizer(
        rng=scripted_random(randints=[1, 1, 50], choices=[0, 0, 1]),
        identities=[make_identity("existing"), make_identity("fresh", city="Peoria")],
    )

    result = synth.synthesize_order(cfg)

    assert result.ok
    created = store.customers[result.customer_id]
    assert created.username == "fresh"
    assert created.role == "customer"
    assert created.billing == created.shipping
    assert created.billing.city == "Peoria"
    assert created.billing.first_name == "Test"
    assert store.orders[result.order_id].draft.billing.city == "Peoria"


def test_empty_identity_pool_fails_resolution(make_settings, make_synthesizer):
    cfg = make_settings(create_users=True)
    synth = make_synthesizer(rng=scripted_random(randints=[1, 1]))

    result = synth.synthesize_order(cfg)

    assert result.error == "CustomerResolutionFailed"
    assert result.cause == "NoCandidateRows"


def test_coin_flip_zero_picks_existing_customer(make_settings, make_synthesizer, store):
    cfg = make_settings(min_products=1, max_products=1, create_users=True)
    synth = make_synthesizer(
        rng=scripted_random(randints=[1, 0, 60]),
        identities=[make_identity("fresh")],
    )

    result = synth.synthesize_order(cfg)

    assert result.ok
    assert result.customer_id == 100
    assert result.status is OrderStatus.PROCESSING
    assert all(c.username != "fresh" for c in store.customers.values())


def test_no_existing_customers(make_settings, scheduler):
    store = InMemoryStore(products={1: "publish"})
    synth = OrderSynthesizer(
        catalog=store,
        directory=store,
        identities=ListIdentityPool(),
        checkout=store,
        scheduler=scheduler,
    )

    result = synth.synthesize_order(make_settings(create_users=False))

    assert result.error == "CustomerResolutionFailed"
    assert result.cause == "NoCustomersAvailable"
    assert store.orders == {}


def test_customer_ids_are_loaded_once(make_settings, make_synthesizer, store):
    cfg = make_settings(create_users=False)
    synth = make_synthesizer()

    with mock.patch.object(store, "list_customer_ids", wraps=store.list_customer_ids) as list_ids:
        synth.synthesize_order(cfg)
        synth.synthesize_order(cfg)

    assert list_ids.call_count == 1
    assert len(store.orders) == 2


def test_checkout_rejection_is_reported(make_settings, make_synthesizer, timer):
    checkout = mock.Mock()
    checkout.create_order.side_effect = HostError("rejected", status_code=500)
    synth = make_synthesizer(checkout=checkout)

    result = synth.synthesize_order(make_settings(create_users=False))

    assert result.error == "OrderCreationFailed"
    assert result.cause == "HostError"
    assert result.stage == "submit_order"
    checkout.finalize_order.assert_not_called()
    assert timer.next_scheduled() == result.next_fire_at


def test_finalize_failure_is_reported(make_settings, make_synthesizer):
    checkout = mock.Mock()
    checkout.create_order.return_value = 55
    checkout.finalize_order.side_effect = HostError("cannot update", status_code=400)
    synth = make_synthesizer(checkout=checkout)

    result = synth.synthesize_order(make_settings(create_users=False))

    assert not result.ok
    assert result.error == "OrderCreationFailed"
    assert result.order_id is None


def test_order_carries_payment_marker_and_timestamp(make_settings, make_synthesizer, store):
    stamp = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    synth = make_synthesizer(now=lambda: stamp)

    result = synth.synthesize_order(make_settings(create_users=False))

    order = store.orders[result.order_id]
    assert result.created_at == stamp
    assert order.created_at == stamp
    assert order.draft.payment_method == PAYMENT_METHOD
    assert order.meta["ordersim_customer_user"] == "100"
    assert order.meta["ordersim_payment_method"] == PAYMENT_METHOD


def test_failure_is_logged_with_stage(make_settings, make_synthesizer, caplog):
    synth = make_synthesizer(rng=scripted_random(randints=[1, 1]))

    with caplog.at_level(logging.ERROR):
        synth.synthesize_order(make_settings(create_users=True))

    records = [r for r in caplog.records if r.getMessage().startswith("Order synthesis failed")]
    assert len(records) == 1
    assert records[0].stage == "resolve_customer"
    assert records[0].cause == "NoCandidateRows"
    assert records[0].path == "create"
