from typing import List

from .log import get_logger
from .models import FEMININE, MASCULINE, Perfume
from .storage import Storage

logger = get_logger(__name__)

FEMININE_PERFUMES = [
    Perfume(
        name="Jardin de Fleurs",
        brand="Maison Elégance",
        description="Una fragancia sofisticada y femenina con notas de jazmín, rosa y vainilla. "
                    "Refleja una personalidad elegante y romántica.",
        gender=FEMININE,
        image_url="https://images.unsplash.com/photo-1595457730125-2f194d8d1db1?auto=format&fit=crop&w=800&h=800",
        notes=["Jazmín", "Rosa", "Vainilla", "Ámbar"],
        occasions=["Eventos formales", "Citas románticas", "Reuniones sociales"],
        profile_tags=["Elegante", "Romántica", "Sofisticada", "Sensual"],
    ),
    Perfume(
        name="Velvet Dream",
        brand="Lumine",
        description="Fragancia dulce con notas florales y toques de vainilla. "
                    "Ideal para las mujeres que buscan un aroma sutil pero memorable.",
        gender=FEMININE,
        image_url="https://pixabay.com/get/g61d4c27ac8f6d782356cdf37ec0fd86b415b43d3c7d4c86229a92a653550f1b248810cae8ae58bde543c1865bfe0dda6a2713ac8d8736c71d100e9a975510ee0_1280.jpg",
        notes=["Vainilla", "Flores blancas", "Almizcle", "Sándalo"],
        occasions=["Uso diario", "Trabajo", "Eventos casuales"],
        profile_tags=["Dulce", "Suave", "Alegre", "Moderna"],
    ),
    Perfume(
        name="Spring Bouquet",
        brand="Floralie",
        description="Fragancia fresca con notas cítricas y florales ligeras. "
                    "Perfecta para mujeres de espíritu libre y amantes de la naturaleza.",
        gender=FEMININE,
        image_url="https://images.unsplash.com/photo-1617897903246-719242758050?auto=format&fit=crop&w=600&h=400",
        notes=["Bergamota", "Azahar", "Lirio", "Jazmín", "Almizcle blanco"],
        occasions=["Uso diario", "Actividades al aire libre", "Primavera/Verano"],
        profile_tags=["Fresca", "Juvenil", "Natural", "Espontánea"],
    ),
]

MASCULINE_PERFUMES = [
    Perfume(
        name="Ébano Intenso",
        brand="Noble Woods",
        description="Una fragancia masculina con carácter, notas de madera de cedro, cuero y ámbar. "
                    "Proyecta confianza y distinción.",
        gender=MASCULINE,
        image_url="https://images.unsplash.com/photo-1556228578-8c89e6adf883?auto=format&fit=crop&w=800&h=800",
        notes=["Cedro", "Cuero", "Ámbar", "Pimienta negra"],
        occasions=["Eventos formales", "Negocios", "Noches de gala"],
        profile_tags=["Elegante", "Confiado", "Sofisticado", "Poderoso"],
    ),
    Perfume(
        name="Midnight Essence",
        brand="Noir Collection",
        description="Aroma intenso con notas amaderadas y especiadas. "
                    "Para hombres de carácter fuerte y personalidad misteriosa.",
        gender=MASCULINE,
        image_url="https://images.unsplash.com/photo-1588405748880-12d1d2a59f75?auto=format&fit=crop&w=600&h=400",
        notes=["Cardamomo", "Pachulí", "Oud", "Sándalo", "Vainilla"],
        occasions=["Ocasiones especiales", "Citas románticas", "Noches"],
        profile_tags=["Misterioso", "Intenso", "Cautivador", "Sensual"],
    ),
    Perfume(
        name="Aqua Vitae",
        brand="Marine Elements",
        description="Fragancia fresca y vigorizante con notas marinas y cítricas. "
                    "Para hombres dinámicos y aventureros.",
        gender=MASCULINE,
        image_url="https://images.unsplash.com/photo-1594035910387-fea47794261f?auto=format&fit=crop&w=800&h=800",
        notes=["Limón", "Sal marina", "Menta", "Almizcle", "Madera de teca"],
        occasions=["Uso diario", "Deportes", "Actividades al aire libre"],
        profile_tags=["Activo", "Moderno", "Refrescante", "Dinámico"],
    ),
]


def seed_catalog(storage: Storage) -> List[Perfume]:
    """Insert the sample perfumes; feminine first, so ids 1-3 are feminine and 4-6 masculine."""
    created = [storage.create_perfume(p) for p in FEMININE_PERFUMES + MASCULINE_PERFUMES]
    logger.info(f"Seeded perfume catalog with {len(created)} perfumes")
    return created
