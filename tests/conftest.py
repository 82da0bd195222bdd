import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from pokedeck.db.operations import upsert_card
from pokedeck.models.card import ENERGY, POKEMON, TRAINER, Attack, Card
from pokedeck.models.db import Base
from pokedeck.services import deck_service


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncSession:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def clear_deck_locks():
    """Locks are process-wide; make sure no test leaks one into the next."""
    yield
    assert len(deck_service._deck_locks) == 0


@pytest.fixture
def charizard() -> Card:
    return Card(
        id="base1-4",
        name="Charizard",
        category=POKEMON,
        subtypes=("Stage 2",),
        hp="120",
        types=("Fire",),
        attacks=(Attack(name="Fire Spin", cost=("Fire",) * 4, damage="100"),),
        set_id="base1",
        set_name="Base",
    )


@pytest.fixture
def pikachu() -> Card:
    return Card(
        id="base1-58",
        name="Pikachu",
        category=POKEMON,
        subtypes=("Basic",),
        hp="40",
        types=("Lightning",),
        attacks=(Attack(name="Gnaw", cost=("Colorless",), damage="10"),),
        set_id="base1",
        set_name="Base",
    )


@pytest.fixture
def fire_energy() -> Card:
    return Card(
        id="base1-98",
        name="Fire Energy",
        category=ENERGY,
        subtypes=("Basic",),
        types=("Fire",),
        set_id="base1",
        set_name="Base",
    )


@pytest.fixture
def double_colorless() -> Card:
    """Special Energy: Energy, but not basic, so the copy limit applies."""
    return Card(
        id="base1-96",
        name="Double Colorless Energy",
        category=ENERGY,
        subtypes=("Special",),
        set_id="base1",
        set_name="Base",
    )


@pytest.fixture
def gust_of_wind() -> Card:
    return Card(
        id="base1-93",
        name="Gust of Wind",
        category=TRAINER,
        subtypes=("Item",),
        rules=("Choose 1 of your opponent's Benched Pokémon and switch it with the Defending Pokémon.",),
        set_id="base1",
        set_name="Base",
    )


@pytest.fixture
async def catalog(session_factory, charizard, pikachu, fire_energy, double_colorless, gust_of_wind):
    """Store the sample cards in the catalog."""
    cards = [charizard, pikachu, fire_energy, double_colorless, gust_of_wind]
    async with session_factory() as session:
        for card in cards:
            await upsert_card(session, card)
        await session.commit()
    return {card.id: card for card in cards}
