from django.db import models
from django.db.models import F

DEFAULT_CATEGORIES = [
    ('MED', '의료소모품', '일반 의료용 소모품'),
    ('SYR', '주사기/바늘', '주사기, 바늘 등'),
    ('BAN', '붕대/거즈', '붕대, 거즈, 드레싱'),
    ('PRO', '보호구', '장갑, 마스크, 가운'),
    ('INF', '수액/주사액', '수액, 주사액'),
    ('ETC', '기타', '기타 품목'),
]


class Category(models.Model):
    """Product categories"""
    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=100, db_index=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.code})"

    class Meta:
        db_table = 'categories'
        verbose_name_plural = 'categories'
        ordering = ['code']


class ProductQuerySet(models.QuerySet):
    def low_stock(self):
        """Products whose stock is below their safety stock"""
        return self.filter(stock__lt=F('safety_stock'))


class Product(models.Model):
    """Product master"""
    code = models.CharField(max_length=50, unique=True, db_index=True)
    name = models.CharField(max_length=200, db_index=True)
    category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    stock = models.IntegerField(default=0)
    safety_stock = models.IntegerField(default=0)
    image = models.ImageField(upload_to='product-images/', blank=True, null=True)
    b2b_enabled = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ProductQuerySet.as_manager()

    def __str__(self):
        return f"{self.name} ({self.code})"

    @property
    def is_low_stock(self):
        return self.stock < self.safety_stock

    class Meta:
        db_table = 'products'
        ordering = ['code']
        indexes = [
            models.Index(fields=['category', 'code'], name='idx_product_category_code'),
        ]


class ProductLineItem(models.Model):
    """
    Line item on an order-like document.

    Product code and name are copied at creation so documents keep printing
    correctly after the product is renamed or deleted.
    """
    product = models.ForeignKey(Product, on_delete=models.SET_NULL, null=True, blank=True, related_name='%(app_label)s_%(class)s_set')
    product_code = models.CharField(max_length=50, blank=True)
    product_name = models.CharField(max_length=200)
    quantity = models.IntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=0)

    def get_line_total(self):
        return self.quantity * self.unit_price

    def save(self, *args, **kwargs):
        if self.product_id and not self.product_name:
            self.product_name = self.product.name
        if self.product_id and not self.product_code:
            self.product_code = self.product.code
        self.subtotal = self.get_line_total()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"

    class Meta:
        abstract = True
        ordering = ['id']
