import pytest

from survey_models import (
    AcousticLevel, Cable, ConnectivityZone, Display, DisplayPosition, DisplayType, ElementType,
    Environment, Intensity, Material, Photo, Project, Room, RoomElement, SignalType, Sonorization,
    SonorizationType, Source, SourceType, TriState, Usage, Visio, Wall,
)


@pytest.fixture
def empty_room() -> Room:
    return Room(room_id="r0", name="Salle vide")


@pytest.fixture
def meeting_room() -> Room:
    """A complete survey that passes every validation rule"""
    return Room(
        room_id="r1",
        name="Salle Conseil",
        typology="Salle de réunion",
        quote_reference="DEV-2024-118",
        project=Project(client_name="Mairie de Lyon", site_name="Hôtel de ville", contact_name="C. Martin"),
        usage=Usage(
            main_usage="Conseil municipal",
            intensity=Intensity.REGULAR,
            platform_type="Teams Room",
            people_count=12,
            reservation=True,
        ),
        environment=Environment(
            length_m=8.0,
            width_m=5.0,
            height_m=2.8,
            wall_a=Material.PLACO,
            wall_b=Material.VITRAGE,
            wall_c=Material.BETON,
            wall_d=Material.BOIS,
            principal_wall=Wall.A,
            rj45_present=True,
            rj45_count=4,
        ),
        visio=Visio(required=True, platform="Teams", camera_count=1, camera_types=("PTZ",)),
        sonorization=Sonorization(
            sonorization_type=SonorizationType.CONFERENCE,
            voice_reinforcement=True,
            mic_table=2,
            acoustic_level=AcousticLevel.ACCEPTABLE,
            dsp=TriState.UNKNOWN,
            dante=TriState.NO,
        ),
        sources=(Source(SourceType.PC_FIXE), Source(SourceType.LAPTOP, quantity=2)),
        displays=(Display(DisplayType.MONITOR, size_inches=75, position=DisplayPosition.FRONT,
                          viewer_distance_m=4.0),),
        cables=(
            Cable("PC fixe", "Sélecteur vidéo", SignalType.HDMI, "HDMI direct", 3.0, 3.6),
            Cable("Laptop", "Sélecteur vidéo", SignalType.HDMI, "HDMI direct", 3.0, 3.6),
            Cable("Sélecteur vidéo", "Moniteur", SignalType.HDMI, "HDMI direct", 4.0, 4.8),
        ),
        zones=(ConnectivityZone("Table", hdmi_count=1, usbc_count=1, rj45_count=2, power_230v_count=4,
                                distance_to_control_room_m=3.0),),
        elements=(
            RoomElement(ElementType.SCREEN, 50, 2, label="Écran principal"),
            RoomElement(ElementType.SPEAKER, 10, 20),
            RoomElement(ElementType.SPEAKER, 90, 20),
            RoomElement(ElementType.CAMERA, 50, 5),
        ),
        photos=(Photo("Vue d'ensemble", "https://photos.example.com/salle-conseil/1.jpg"),),
    )
