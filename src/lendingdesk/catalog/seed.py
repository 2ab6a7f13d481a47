"""Fixed inventory loaded when the desk starts."""

from ..db.schemas import BookCreate

SEED_BOOKS: list[BookCreate] = [
    BookCreate(code="LIB001", title="Satanás", author="Mario Mendoza"),
    BookCreate(code="LIB002", title="Cosas que piensas...", author="Amalia Andrade"),
    BookCreate(code="LIB003", title="Los siete maridos de Evelyn Hugo", author="Taylor Jenkins Reid"),
    BookCreate(code="LIB004", title="Blue sisters", author="Coco Mellors"),
    BookCreate(code="LIB005", title="Cadáver exquisito", author="Agustina Bazterrica"),
    BookCreate(code="LIB006", title="Lo que la nieve susurra...", author="María Martinez"),
    BookCreate(code="LIB007", title="Lady masacre", author="Mario Mendoza"),
    BookCreate(code="LIB008", title="Amarilla", author="R. F. Kuang"),
    BookCreate(code="LIB009", title="La cúpula", author="Stephen King"),
    BookCreate(code="LIB010", title="Relato de un asesino", author="Mario Mendoza"),
]
