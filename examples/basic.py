# Minimal example showing usage of SqlAdapter from `sqladapter`.
# Run this example after adding `src/` to PYTHONPATH or installing the package.
from dataclasses import dataclass

from sqladapter.main import SqlAdapter
from sqladapter.schema import column

# Optionally override location with environment variable
# os.environ['SQLADAPTER_DB'] = '/tmp/example_sqladapter.db'


@dataclass
class Book:
    # sqlite rejects nvarchar(MAX), so text columns name their size here
    IsbnCode: str = column(key=True, type_name="nchar(10)", default="")
    Title: str = column(type_name="nvarchar(200)", default="")


@dataclass
class Author:
    Id: int = column(type_name="smallint", default=0)
    Name: str = column(type_name="nvarchar(50)", default="")


@dataclass
class Writing:
    BookCode: str = column(key=True, type_name="char(10)", default="")
    AuthorId: int = column(key=True, default=0)


adapter = SqlAdapter()

adapter.create_table(Book)
book = Book(IsbnCode="4774180947", Title="LINQ from the ground up")
print('Inserted:', adapter.insert_row(book))
print('Deleted:', adapter.delete_row(book))
adapter.drop_table(Book)

adapter.create_table(Author)
adapter.create_table(Writing)
adapter.drop_table(Author)
adapter.drop_table(Writing)
