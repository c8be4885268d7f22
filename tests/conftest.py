from typing import List

import pytest

from talker_market.search.models import Product


@pytest.fixture
def laptops() -> List[Product]:
    return [
        Product(
            id=1,
            title="Lenovo IdeaPad 3",
            price=549.99,
            rating=4.5,
            seller_reputation=5,
            brand="Lenovo",
            cpu="AMD Ryzen 5 5500U",
            disk=512000,
            ram=8192,
            post_url="https://example.com/p/1",
            img_url="https://example.com/i/1.jpg",
            free_shipping=True,
        ),
        Product(
            id=2,
            title="HP 15s",
            price=489.0,
            brand="HP",
            cpu="Intel Core i5-1135G7",
            disk=256000,
            ram=16384,
            free_shipping=False,
        ),
    ]
