from app.models.user import User
from app.models.category import Category
from app.models.book import Book
from app.models.cart import Cart, CartItem
from app.models.discount_code import DiscountCode
from app.models.order import Order
from app.models.order_item import OrderItem
from app.models.return_request import ReturnRequest
from app.models.review import Review

# add ALL models here
