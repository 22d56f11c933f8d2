from db.client import DataClient
from db.models import Product, Price


class ProductRepository:
    def __init__(self, client: DataClient):
        self.client = client

    def list_active(self) -> list[Product]:
        return self.client.query(Product).filter(Product.active == True).all()  # noqa: E712

    def get_product(self, product_id: str) -> Product | None:
        return self.client.query(Product).filter(Product.id == product_id).first()

    def get_price(self, price_id: str) -> Price | None:
        return self.client.query(Price).filter(Price.id == price_id).first()

    def upsert_product(self, update_data: dict) -> Product:
        product = self.client.db.merge(Product(**update_data))
        self.client.check_write(product)
        self.client.commit()
        return product

    def upsert_price(self, update_data: dict) -> Price:
        price = self.client.db.merge(Price(**update_data))
        self.client.check_write(price)
        self.client.commit()
        return price

    def delete_product(self, product_id: str) -> bool:
        product = self.get_product(product_id)
        if not product:
            return False
        self.client.check_write(product)
        self.client.db.delete(product)
        self.client.commit()
        return True

    def delete_price(self, price_id: str) -> bool:
        price = self.get_price(price_id)
        if not price:
            return False
        self.client.check_write(price)
        self.client.db.delete(price)
        self.client.commit()
        return True
