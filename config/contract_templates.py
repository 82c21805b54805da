# Default contract texts, one per account role type of the post owner.
# Placeholders are filled by services.contract_service; adding a variant is a data change here.

BLANK = "........................................................................"

APPORTEUR_TEMPLATE = """CONTRAT D'APPORTEUR D'AFFAIRES
(Mise en relation via la plateforme {platform})

Entre les soussignés :

Le Professionnel de l'immobilier
Nom / Dénomination : {collaborator_name}
Adresse : {collaborator_address}
Téléphone : {collaborator_phone}
Email : {collaborator_email}
Statut : {collaborator_status}
(ci-après désigné « Le Professionnel »)

Et

L'Apporteur d'affaires
Nom : {owner_last_name}
Prénom : {owner_first_name}
Adresse : {owner_address}
Téléphone : {owner_phone}
Email : {owner_email}
(ci-après désigné « L'Apporteur »)

Les deux parties conviennent ce qui suit :

1. Objet du contrat
L'Apporteur met en relation, via la plateforme {platform}, un prospect (vendeur, acquéreur, bailleur, locataire ou propriétaire d'un bien) avec le Professionnel. La mission de l'Apporteur se limite strictement à la mise en relation. Aucun conseil, négociation, estimation, visite ou action commerciale ne peut être réalisée par l'Apporteur.
La plateforme {platform} ne perçoit ni ne manipule aucun fonds.

2. Fonctionnement de la mise en relation
La mise en relation est effectuée exclusivement via la plateforme {platform}. Le Professionnel reçoit les coordonnées du prospect et reste libre d'accepter ou non la prise en charge du contact. L'Apporteur s'engage à informer le prospect qu'il sera contacté par le Professionnel.

3. Rôle respectif des parties
L'Apporteur :
• Se limite à transmettre un contact.
• Ne perçoit aucun fonds.
• Ne représente pas le Professionnel.
• Ne peut en aucun cas se présenter comme agent immobilier.

Le Professionnel :
• Traite ou non le prospect présenté.
• Informe l'Apporteur de l'issue de la relation si une transaction aboutit.
• Rédige et signe, le cas échéant, le document officiel d'apporteur d'affaires prévu par son réseau ou agence, ce contrat n'étant qu'un accord préalable.

4. Rémunération de l'Apporteur
Montant convenu : {compensation}

La rémunération est due uniquement :
- si la mise en relation a été réalisée via {platform},
- si le prospect aboutit à une transaction signée par acte authentique,
- et si un document officiel du réseau / agence du Professionnel vient confirmer l'accord.

5. Indépendance des parties
L'Apporteur et le Professionnel agissent de manière totalement indépendante. Le présent contrat ne crée ni contrat de travail, ni mandat, ni partenariat exclusif, ni obligation de résultat.

6. Confidentialité
Les informations échangées entre les deux parties sont confidentielles et destinées uniquement à la mise en relation.

7. Protection des données
Chaque partie s'engage à respecter la réglementation en vigueur (RGPD) concernant les données personnelles du prospect.

8. Durée et résiliation
Le présent contrat prend effet à la date de signature et reste valable jusqu'à résiliation par l'une ou l'autre des parties, sans préavis particulier.

9. Litiges
En cas de différend, les parties s'engagent à rechercher une solution amiable avant toute procédure.

Fait à ......................................................, le {date}

Le Professionnel
Signature précédée de la mention « Lu et approuvé »

L'Apporteur
Signature précédée de la mention « Lu et approuvé »"""

AGENT_TEMPLATE = """CONTRAT DE COLLABORATION ENTRE PROFESSIONNELS DE L'IMMOBILIER
(Mise en relation via la plateforme {platform})

Entre les soussignés :

Le Professionnel Délégant
Nom / Dénomination : {owner_name}
Adresse : {owner_address}
Téléphone : {owner_phone}
Email : {owner_email}
N° d'identification professionnelle : {owner_professional_number}
(ci-après « Le Délégant »)

Et

Le Professionnel Délégué
Nom / Dénomination : {collaborator_name}
Adresse : {collaborator_address}
Téléphone : {collaborator_phone}
Email : {collaborator_email}
N° d'identification professionnelle : {collaborator_professional_number}
(ci-après « Le Délégué »)

Les deux parties conviennent ce qui suit :

1. Objet de la collaboration
La présente collaboration vise à faciliter, via la plateforme {platform}, le partage d'un mandat ou l'échange d'un client (acquéreur, vendeur, investisseur ou locataire) entre deux professionnels de l'immobilier.
La plateforme {platform} est uniquement un outil de mise en relation : elle n'intervient pas dans l'accord entre les parties, ne négocie aucune condition et ne perçoit aucune commission.

2. Nature du partage
La collaboration peut porter sur :
- une délégation de mandat (mandat simple ou exclusif),
- un partage d'acquéreur ou de projet,
- la co-vente ou vente collaborative entre professionnels.

3. Transmission des informations
Le Délégant transmet au Délégué les informations essentielles sur le bien ou le client et les pouvoirs autorisés (visites, publicité, communication), dans les limites prévues au mandat initial.
Le Délégué s'engage à utiliser les informations reçues uniquement dans le cadre de la collaboration.

4. Rémunération et partage d'honoraires
Modalités convenues entre les parties :
{compensation}

Les honoraires ne sont dus que si une transaction est réalisée et signée par acte authentique.
Le versement des commissions s'effectue directement entre le Délégant et le Délégué.

5. Indépendance et responsabilités
Les deux professionnels agissent en totale indépendance. Le présent contrat ne constitue pas un mandat commun et ne crée aucun lien de subordination.

6. Durée de la collaboration
La collaboration prend effet à la date de signature. Elle prend automatiquement fin à la fin du mandat initial, à la réalisation de la transaction, ou sur simple notification écrite d'une des parties.
Préavis recommandé : 7 jours.

7. Confidentialité
Les informations échangées sont strictement confidentielles.

8. RGPD – Données personnelles
Chaque partie garantit le respect de la réglementation en vigueur concernant les données personnelles.

9. Litiges
En cas de désaccord, les deux parties s'engagent à privilégier une solution amiable avant toute procédure.

Fait à .............................................., le {date}

Le Délégant
Signature précédée de la mention « Lu et approuvé »

Le Délégué
Signature précédée de la mention « Lu et approuvé »"""

CONTRACT_TEMPLATES = {
    "apporteur": {
        "name": "Contrat d'apporteur d'affaires",
        "body": APPORTEUR_TEMPLATE,
        "commission_suffix": "% de la commission agence",
    },
    "agent": {
        "name": "Contrat de collaboration entre professionnels",
        "body": AGENT_TEMPLATE,
        "commission_suffix": "% de la commission",
    },
}

# Used when the post owner's account type has no dedicated template
DEFAULT_TEMPLATE_KEY = "agent"


def get_contract_template(account_role_type: str) -> dict:
    return CONTRACT_TEMPLATES.get(account_role_type, CONTRACT_TEMPLATES[DEFAULT_TEMPLATE_KEY])
