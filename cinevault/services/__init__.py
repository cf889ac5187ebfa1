"""
Couche services applicatifs (cas d'usage).

Les services orchestrent la logique du domaine des assets :
- Registre des specifications et limites par type
- Scan, validation et score des fichiers locaux
- Decouverte d'un repertoire de media
- Selection et remplacement des assets d'un slot

Les services dependent des ports (interfaces) de core/, jamais des
implementations concretes de infrastructure/.
"""
