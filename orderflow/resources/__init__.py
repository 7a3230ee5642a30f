from .auth_resource import blp_auth
from .business_resource import blp_business
from .customer_resource import blp_customer
from .product_resource import blp_product
from .order_resource import blp_order
from .admin_resource import blp_admin
