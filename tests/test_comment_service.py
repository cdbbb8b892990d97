import pytest

from critico.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from critico.infrastructure.database.models.product_model import ProductModel
from critico.infrastructure.database.session import db_session
from critico.services.comment_service import mean_stars


@pytest.mark.parametrize(
    "values, expected",
    [
        ([], 0.0),
        ([5], 5.0),
        ([4, 5], 4.5),
        ([4, 4, 5], 4.5),  # 4.33 rounds up to the half
        ([3, 4, 4], 3.5),  # 3.67
        ([1, 1, 1, 2], 1.5),  # 1.25 rounds half up
        ([1, 2, 2, 2], 2.0),  # 1.75
    ],
)
def test_mean_stars_rounds_to_half(values, expected):
    assert mean_stars(values) == expected


def _grant_via_redemption(services, users, product, tester_key="tester"):
    req = services(lambda s: s.requests.request_test(product_id=product, tester_id=users[tester_key]))
    result = services(lambda s: s.requests.accept(message_id=req.id, actor_id=users["owner"]))
    services(lambda s: s.requests.redeem(token=result.token, user_id=users[tester_key]))


def _stars(product_id):
    with db_session() as session:
        return session.get(ProductModel, product_id).stars


def test_reviews_need_a_redeemed_token(services, users, product):
    with pytest.raises(ForbiddenError):
        services(lambda s: s.comments.post_comment(product_id=product, user_id=users["tester"], content="super"))

    _grant_via_redemption(services, users, product)
    comment = services(
        lambda s: s.comments.post_comment(product_id=product, user_id=users["tester"], content="super", stars=4)
    )

    assert comment.message_type == "product"
    assert comment.product_id == product
    assert comment.receiver_id is None
    assert comment.stars == 4
    assert comment.sender.id == users["tester"]


def test_product_stars_follow_rated_reviews(services, users, product):
    _grant_via_redemption(services, users, product, "tester")
    _grant_via_redemption(services, users, product, "other")

    services(lambda s: s.comments.post_comment(product_id=product, user_id=users["tester"], content="a", stars=4))
    assert _stars(product) == 4.0

    services(lambda s: s.comments.post_comment(product_id=product, user_id=users["other"], content="b", stars=5))
    assert _stars(product) == 4.5

    # unrated comments leave the mean alone
    services(lambda s: s.comments.post_comment(product_id=product, user_id=users["other"], content="c"))
    assert _stars(product) == 4.5

    comments = services(lambda s: s.comments.list_comments(product_id=product))
    assert [c.content for c in comments] == ["a", "b", "c"]

    _, reviews = services(lambda s: s.users.get_profile(users["tester"]))
    assert reviews == 1


@pytest.mark.parametrize("stars", [0, 6, -1])
def test_stars_out_of_range(services, users, product, stars):
    _grant_via_redemption(services, users, product)
    with pytest.raises(ValidationError):
        services(
            lambda s: s.comments.post_comment(product_id=product, user_id=users["tester"], content="x", stars=stars)
        )


def test_blank_review_is_rejected(services, users, product):
    _grant_via_redemption(services, users, product)
    with pytest.raises(ValidationError):
        services(lambda s: s.comments.post_comment(product_id=product, user_id=users["tester"], content="  "))


def test_comments_all_land_in_one_product_thread(services, users, product):
    _grant_via_redemption(services, users, product)
    a = services(lambda s: s.comments.post_comment(product_id=product, user_id=users["tester"], content="1"))
    b = services(lambda s: s.comments.post_comment(product_id=product, user_id=users["tester"], content="2"))
    assert a.chat_id == b.chat_id


def test_unknown_product(services, users):
    with pytest.raises(NotFoundError):
        services(lambda s: s.comments.list_comments(product_id=31337))
